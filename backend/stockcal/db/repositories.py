"""
Repository pattern for data access.

Provides clean interfaces for database operations, abstracting SQLAlchemy details.
Each repository handles a single aggregate (Stock, Event, Placement, Vote,
UserPreference, UserPortfolio). Repositories flush but never commit; the
request (or get_db_context) owns the transaction.
"""

from datetime import datetime, time, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from loguru import logger

from stockcal.db.models import Event, Placement, PortfolioHolding, Stock, UserPortfolio, UserPreference, Vote
from stockcal.domain.events import EventInput, EventRecord
from stockcal.domain.recommendations import QuestionnaireData
from stockcal.domain.stocks import SEARCH_RESULT_LIMIT, rank_stocks
from stockcal.domain.votes import VoteAggregate, validate_vote
from stockcal.utils.datetime import to_calendar_date, to_iso_date, utcnow
from stockcal.utils.errors import DuplicateRecordError, RecordNotFoundError


# Placement listing across every calendar (global and per ticker)
ALL_CALENDARS = object()


class StockRepository:
    """Repository for Stock operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_ticker(self, ticker: str) -> Optional[Stock]:
        """Get stock by ticker (case-insensitive)."""
        return self.db.query(Stock).filter(Stock.ticker == ticker.strip().upper()).first()

    def get_all(self) -> List[Stock]:
        """All stocks in catalog (insertion) order."""
        return self.db.query(Stock).order_by(Stock.id).all()

    def search(self, query: str, limit: int = SEARCH_RESULT_LIMIT) -> List[Stock]:
        """Ranked ticker/name search."""
        pattern = f"%{query.strip().lower()}%"
        candidates = (
            self.db.query(Stock)
            .filter(or_(func.lower(Stock.ticker).like(pattern), func.lower(Stock.name).like(pattern)))
            .all()
        )
        return rank_stocks(candidates, query, limit=limit)

    def create(self, ticker: str, name: str, sector: str, type: str = "stock") -> Stock:
        if self.get_by_ticker(ticker):
            raise DuplicateRecordError(f"Stock with ticker {ticker} already exists")

        stock = Stock(ticker=ticker.upper(), name=name, sector=sector, type=type)
        self.db.add(stock)
        self.db.flush()
        return stock


class EventRepository:
    """Repository for catalog Event operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, event_id: int) -> Optional[Event]:
        return self.db.query(Event).filter(Event.id == event_id).first()

    def get_or_raise(self, event_id: int) -> Event:
        event = self.get_by_id(event_id)
        if not event:
            raise RecordNotFoundError(f"Event {event_id} not found", details={"event_id": event_id})
        return event

    def get_all(self, start_date=None, end_date=None) -> List[Event]:
        """
        Catalog events in display order (date, then id).

        Args:
            start_date: Inclusive first calendar day
            end_date: Inclusive last calendar day
        """
        query = self.db.query(Event)

        if start_date is not None:
            start = datetime.combine(to_calendar_date(start_date), time.min, tzinfo=timezone.utc)
            query = query.filter(Event.event_date >= start)

        if end_date is not None:
            end = datetime.combine(to_calendar_date(end_date), time.max, tzinfo=timezone.utc)
            query = query.filter(Event.event_date <= end)

        return query.order_by(Event.event_date, Event.id).all()

    def get_records(self, start_date=None, end_date=None) -> List[EventRecord]:
        return [EventRecord.model_validate(e) for e in self.get_all(start_date, end_date)]

    def create(self, data: EventInput) -> Event:
        event = Event(**data.model_dump())
        self.db.add(event)
        self.db.flush()
        return event

    def exists(self, title: str, event_date: datetime) -> bool:
        return (
            self.db.query(Event.id)
            .filter(Event.title == title, Event.event_date == event_date)
            .first()
            is not None
        )


class PlacementRepository:
    """Repository for server-side event placements."""

    def __init__(self, db: Session):
        self.db = db

    def _scope_filter(self, query, stock_ticker):
        if stock_ticker is ALL_CALENDARS:
            return query
        if stock_ticker is None:
            return query.filter(Placement.stock_ticker.is_(None))
        return query.filter(Placement.stock_ticker == stock_ticker.upper())

    def find(self, user_id: str, event_id: int, date, stock_ticker: Optional[str] = None) -> Optional[Placement]:
        query = self.db.query(Placement).filter(
            Placement.user_id == user_id,
            Placement.event_id == event_id,
            Placement.date == to_iso_date(date),
        )
        return self._scope_filter(query, stock_ticker).first()

    def create(
        self, user_id: str, event_id: int, date, stock_ticker: Optional[str] = None
    ) -> Tuple[Placement, bool]:
        """
        Place an event for a user.

        Returns:
            (placement, created) where created is False when the same
            placement already existed and was returned unchanged
        """
        ticker = stock_ticker.upper() if stock_ticker else None
        existing = self.find(user_id, event_id, date, ticker)
        if existing:
            return existing, False

        placement = Placement(user_id=user_id, event_id=event_id, date=to_iso_date(date), stock_ticker=ticker)
        self.db.add(placement)
        self.db.flush()
        logger.info(f"Created placement user={user_id} event={event_id} date={placement.date} ticker={ticker}")
        return placement, True

    def list_for_user(
        self,
        user_id: str,
        start_date=None,
        end_date=None,
        stock_ticker=ALL_CALENDARS,
    ) -> List[Placement]:
        query = self.db.query(Placement).filter(Placement.user_id == user_id)

        if start_date is not None:
            query = query.filter(Placement.date >= to_iso_date(start_date))
        if end_date is not None:
            query = query.filter(Placement.date <= to_iso_date(end_date))

        query = self._scope_filter(query, stock_ticker)
        return query.order_by(Placement.date, Placement.id).all()

    def delete_by_id(self, user_id: str, placement_id: int) -> Placement:
        placement = (
            self.db.query(Placement)
            .filter(Placement.id == placement_id, Placement.user_id == user_id)
            .first()
        )
        if not placement:
            raise RecordNotFoundError("Placement not found", details={"id": placement_id})
        self.db.delete(placement)
        self.db.flush()
        return placement

    def delete_matching(
        self, user_id: str, event_id: int, date, stock_ticker: Optional[str] = None
    ) -> Placement:
        placement = self.find(user_id, event_id, date, stock_ticker)
        if not placement:
            raise RecordNotFoundError(
                "Placement not found",
                details={"event_id": event_id, "date": to_iso_date(date)},
            )
        self.db.delete(placement)
        self.db.flush()
        return placement


class VoteRepository:
    """Repository for impact votes and their tallies."""

    def __init__(self, db: Session):
        self.db = db

    def get_user_vote(self, user_id: str, event_id: int) -> Optional[Vote]:
        return (
            self.db.query(Vote)
            .filter(Vote.user_id == user_id, Vote.event_id == event_id)
            .first()
        )

    def list_user_votes(self, user_id: str) -> List[Vote]:
        return (
            self.db.query(Vote)
            .filter(Vote.user_id == user_id)
            .order_by(Vote.updated_at.desc(), Vote.id.desc())
            .all()
        )

    def get_aggregate(self, event_id: int) -> VoteAggregate:
        """Recount every vote for the event."""
        rows = self.db.query(Vote.vote).filter(Vote.event_id == event_id).all()
        return VoteAggregate.from_votes(event_id, (row[0] for row in rows))

    def submit_vote(self, user_id: str, event_id: int, vote: str) -> Tuple[Vote, VoteAggregate]:
        """
        Record or change a user's vote and return the fresh tally.

        Raises:
            InvalidVoteError: Vote value not allowed (nothing is written)
            RecordNotFoundError: Unknown event
        """
        validate_vote(vote)
        EventRepository(self.db).get_or_raise(event_id)

        record = self.get_user_vote(user_id, event_id)
        if record:
            record.vote = vote
            record.updated_at = utcnow()
        else:
            record = Vote(user_id=user_id, event_id=event_id, vote=vote)
            self.db.add(record)
        self.db.flush()

        logger.info(f"Vote recorded user={user_id} event={event_id} vote={vote}")
        return record, self.get_aggregate(event_id)


class PreferenceRepository:
    """Repository for saved onboarding questionnaires."""

    def __init__(self, db: Session):
        self.db = db

    def save(self, user_id: str, data: QuestionnaireData) -> UserPreference:
        pref = UserPreference(
            user_id=user_id,
            sectors=list(data.sectors),
            investment_timeline=data.investment_timeline,
            check_frequency=data.check_frequency,
            risk_tolerance=data.risk_tolerance,
            portfolio_strategy=data.portfolio_strategy,
            completed_at=utcnow(),
        )
        self.db.add(pref)
        self.db.flush()
        return pref

    def get_latest(self, user_id: str) -> Optional[UserPreference]:
        return (
            self.db.query(UserPreference)
            .filter(UserPreference.user_id == user_id)
            .order_by(UserPreference.created_at.desc(), UserPreference.id.desc())
            .first()
        )

    @staticmethod
    def to_questionnaire(pref: UserPreference) -> QuestionnaireData:
        return QuestionnaireData(
            sectors=pref.sectors,
            investment_timeline=pref.investment_timeline,
            check_frequency=pref.check_frequency,
            risk_tolerance=pref.risk_tolerance,
            portfolio_strategy=pref.portfolio_strategy,
        )


class PortfolioRepository:
    """Repository for user portfolios and their holdings."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: str) -> List[UserPortfolio]:
        return (
            self.db.query(UserPortfolio)
            .filter(UserPortfolio.user_id == user_id)
            .order_by(UserPortfolio.created_at.desc(), UserPortfolio.id.desc())
            .all()
        )

    def get_owned(self, user_id: str, portfolio_id: int) -> UserPortfolio:
        portfolio = (
            self.db.query(UserPortfolio)
            .filter(UserPortfolio.id == portfolio_id, UserPortfolio.user_id == user_id)
            .first()
        )
        if not portfolio:
            raise RecordNotFoundError(
                "Portfolio not found or unauthorized",
                details={"portfolio_id": portfolio_id},
            )
        return portfolio

    def get_or_create(self, user_id: str, broker_name: str) -> UserPortfolio:
        portfolio = (
            self.db.query(UserPortfolio)
            .filter(UserPortfolio.user_id == user_id, UserPortfolio.broker_name == broker_name)
            .first()
        )
        if portfolio:
            return portfolio

        portfolio = UserPortfolio(user_id=user_id, broker_name=broker_name, connection_status="connected")
        self.db.add(portfolio)
        self.db.flush()
        return portfolio

    def replace_holdings(self, portfolio: UserPortfolio, holdings: List[Dict]) -> List[PortfolioHolding]:
        """Swap every holding of the portfolio for ``holdings`` (dicts of column values)."""
        portfolio.holdings.clear()
        self.db.flush()
        for item in holdings:
            portfolio.holdings.append(PortfolioHolding(**item))
        portfolio.updated_at = utcnow()
        self.db.flush()
        return list(portfolio.holdings)

    def mark_synced(self, portfolio: UserPortfolio) -> None:
        portfolio.last_sync_at = utcnow()
        portfolio.connection_status = "connected"
        self.db.flush()

    def delete(self, user_id: str, portfolio_id: int) -> None:
        portfolio = self.get_owned(user_id, portfolio_id)
        self.db.delete(portfolio)
        self.db.flush()
        logger.info(f"Disconnected portfolio {portfolio_id} ({portfolio.broker_name}) for user {user_id}")
