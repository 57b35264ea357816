"""
Shared pytest fixtures for the stock event calendar test suite.

Every test gets a fresh in-memory SQLite database seeded with the default
stock and event catalog, and a TestClient wired to it.
"""

import os
import sys

# Keep the module-level engine off disk before any app import
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from api.dependencies import get_db, get_kv_store
from api.main import app
from api.ratelimit import limiter
from stockcal.db.models import Base
from stockcal.db.seed import seed_events, seed_stocks
from stockcal.domain.placements import InMemoryKeyValueStore
from stockcal.utils.rate_limit import portfolio_sync_limiter

TEST_USER_ID = "user_test123_1700000000000"
OTHER_USER_ID = "user_other456_1700000000000"


@pytest.fixture(scope="function")
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine, "connect")
    def _foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

    db = factory()
    seed_stocks(db)
    seed_events(db)
    db.commit()
    db.close()

    return factory


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    """Session on the seeded test database."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


def _build_client(session_factory, kv_store, user_id=None) -> TestClient:
    def override_get_db():
        db = session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_kv_store] = lambda: kv_store

    client = TestClient(app)
    if user_id:
        client.cookies.set("userId", user_id)
    return client


@pytest.fixture
def client(session_factory, kv_store):
    """TestClient carrying the test user's identity cookie."""
    limiter.reset()
    portfolio_sync_limiter.reset_all()
    yield _build_client(session_factory, kv_store, TEST_USER_ID)
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(session_factory, kv_store):
    """TestClient without an identity cookie."""
    limiter.reset()
    yield _build_client(session_factory, kv_store)
    app.dependency_overrides.clear()


@pytest.fixture
def other_client(client):
    """TestClient for a second user on the same database"""
    other = TestClient(app)
    other.cookies.set("userId", OTHER_USER_ID)
    return other


@pytest.fixture
def event_ids(session_factory):
    """Seeded event ids by title (earliest occurrence for repeated titles)"""
    from stockcal.db.models import Event

    db = session_factory()
    try:
        ids = {}
        for event in db.query(Event).order_by(Event.event_date, Event.id):
            ids.setdefault(event.title, event.id)
        return ids
    finally:
        db.close()
