"""
SQLAlchemy 2.0 database models for the stock event calendar.

Catalog tables (stocks, events) are written only by the seed command;
everything else is keyed by the opaque cookie user id.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Stock(Base):
    """Tradable instrument in the catalog (stock, crypto, etf, index)."""

    __tablename__ = "stocks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    ticker = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="stock")
    sector = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    def __repr__(self) -> str:
        return f"<Stock(ticker={self.ticker}, name={self.name})>"


class Event(Base):
    """Market-moving catalog event with its native date."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(
            "impact_scope IN ('single_stock', 'sector', 'market')",
            name="ck_events_impact_scope",
        ),
        Index("ix_events_category", "category"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    event_date = Column(DateTime(timezone=True), nullable=False, index=True)
    category = Column(String, nullable=False)
    impact_scope = Column(String, nullable=False)
    primary_ticker = Column(String, nullable=True, index=True)
    affected_tickers = Column(JSON, nullable=False, default=list)
    certainty_level = Column(String, nullable=False, default="confirmed")
    source_url = Column(String, nullable=True)
    is_fixed_date = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, date={self.event_date})>"


class Placement(Base):
    """User-chosen calendar date for an event, global or per ticker calendar."""

    __tablename__ = "event_placements"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", "date", "stock_ticker", name="uq_event_placements_key"),
        Index("ix_event_placements_user_date", "user_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    stock_ticker = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    event = relationship("Event", backref="placements")

    def __repr__(self) -> str:
        return f"<Placement(user_id={self.user_id}, event_id={self.event_id}, date={self.date})>"


class Vote(Base):
    """One user's impact vote on an event."""

    __tablename__ = "event_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_event_votes_user_event"),
        CheckConstraint("vote IN ('yes', 'no', 'no_comment')", name="ck_event_votes_vote"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    vote = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    event = relationship("Event", backref="votes")

    def __repr__(self) -> str:
        return f"<Vote(user_id={self.user_id}, event_id={self.event_id}, vote={self.vote})>"


class UserPreference(Base):
    """Saved onboarding questionnaire. The most recent row per user wins."""

    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    sectors = Column(JSON, nullable=False)
    investment_timeline = Column(String, nullable=False)
    check_frequency = Column(String, nullable=False)
    risk_tolerance = Column(String, nullable=False)
    portfolio_strategy = Column(String, nullable=False)
    completed_at = Column(DateTime(timezone=True), default=_utcnow)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<UserPreference(user_id={self.user_id}, sectors={self.sectors})>"


# ============================================================================
# PORTFOLIO MODELS
# ============================================================================

class UserPortfolio(Base):
    """Brokerage (or manual) portfolio connected by a user."""

    __tablename__ = "user_portfolios"
    __table_args__ = (
        CheckConstraint(
            "connection_status IN ('connected', 'disconnected', 'error')",
            name="ck_user_portfolios_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    broker_name = Column(String, nullable=False)
    connection_status = Column(String, nullable=False, default="connected")
    last_sync_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    holdings = relationship(
        "PortfolioHolding",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="PortfolioHolding.id",
    )

    def __repr__(self) -> str:
        return f"<UserPortfolio(id={self.id}, user_id={self.user_id}, broker={self.broker_name})>"


class PortfolioHolding(Base):
    """Single ticker position inside a portfolio."""

    __tablename__ = "portfolio_holdings"
    __table_args__ = (
        Index("ix_portfolio_holdings_portfolio_id", "portfolio_id"),
        Index("ix_portfolio_holdings_ticker", "ticker"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    portfolio_id = Column(Integer, ForeignKey("user_portfolios.id", ondelete="CASCADE"), nullable=False)
    ticker = Column(String, nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    cost_basis = Column(Float, nullable=True)
    current_value = Column(Float, nullable=True)
    last_updated = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    portfolio = relationship("UserPortfolio", back_populates="holdings")

    def __repr__(self) -> str:
        return f"<PortfolioHolding(portfolio_id={self.portfolio_id}, ticker={self.ticker}, quantity={self.quantity})>"
