"""
Database session management with SQLAlchemy 2.0.

Provides engine configuration, session creation and context managers
for safe database access with automatic transaction rollback.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from loguru import logger

from stockcal.config import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine suited to the backend behind ``database_url``.

    SQLite connections are shared across FastAPI worker threads and need
    foreign keys switched on for ON DELETE CASCADE.
    """
    if database_url.startswith("sqlite"):
        new_engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=20,
        pool_recycle=1800,
        echo=echo,
    )


engine = build_engine(settings.database_url, echo=settings.debug)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Prevent lazy load issues after commit
)


def init_db(bind: Engine = None) -> None:
    """Create all tables. Idempotent."""
    from stockcal.db.models import Base

    Base.metadata.create_all(bind=bind or engine, checkfirst=True)
    logger.info("Database schema initialized successfully")


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Get a database session as a context manager.

    Usage:
        with get_db_context() as db:
            stock = db.query(Stock).first()

    The session is committed on success and rolled back on error.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Database transaction failed: {e}")
        raise
    finally:
        db.close()
