"""
Portfolio holdings: manual entry, listing with summary, and mock broker sync.

No real brokerage is contacted. Broker portfolios are refreshed from
MOCK_BROKER_HOLDINGS, standing in for the broker's positions API.
"""

import re
from typing import Dict, List, Optional

from sqlalchemy.orm import Session
from loguru import logger

from stockcal.db.models import UserPortfolio
from stockcal.db.repositories import PortfolioRepository
from stockcal.log_config import get_logger
from stockcal.utils.errors import RecordNotFoundError, ValidationError
from stockcal.utils.rate_limit import RateLimiter, portfolio_sync_limiter

MANUAL_BROKER = "manual"
MAX_MANUAL_TICKERS = 50

TICKER_PATTERN = re.compile(r"^[A-Z]{1,5}$")

audit_log = get_logger(__name__)

# broker -> [(ticker, quantity, cost_basis, current_value)]
MOCK_BROKER_HOLDINGS: Dict[str, List[tuple]] = {
    "robinhood": [
        ("AAPL", 10, 150.00, 1750.50),
        ("TSLA", 5, 220.00, 1100.25),
        ("NVDA", 8, 450.00, 3600.00),
        ("MSFT", 15, 280.00, 4200.75),
        ("GOOGL", 6, 125.00, 750.30),
    ],
    "td_ameritrade": [
        ("SPY", 20, 420.00, 8400.00),
        ("VOO", 12, 380.00, 4560.00),
        ("QQQ", 8, 350.00, 2800.00),
        ("AMZN", 10, 135.00, 1350.00),
        ("META", 7, 280.00, 1960.00),
        ("NFLX", 4, 450.00, 1800.00),
    ],
    "etrade": [
        ("VTI", 25, 220.00, 5500.00),
        ("BND", 30, 75.00, 2250.00),
        ("AMD", 15, 95.00, 1425.00),
        ("INTC", 20, 35.00, 700.00),
        ("DIS", 12, 90.00, 1080.00),
    ],
    MANUAL_BROKER: [],
}


def normalize_manual_tickers(tickers: List[str]) -> List[str]:
    """
    Trim and upper-case tickers, keep valid 1-5 letter symbols, drop repeats.

    Raises:
        ValidationError: No valid ticker left, or more than MAX_MANUAL_TICKERS
    """
    cleaned: List[str] = []
    for raw in tickers:
        ticker = str(raw).strip().upper()
        if TICKER_PATTERN.match(ticker) and ticker not in cleaned:
            cleaned.append(ticker)

    if not cleaned:
        raise ValidationError(
            "No valid tickers provided. Tickers must be 1-5 uppercase letters.",
            details={"field": "tickers"},
        )
    if len(cleaned) > MAX_MANUAL_TICKERS:
        raise ValidationError(
            f"Maximum {MAX_MANUAL_TICKERS} tickers allowed for manual portfolio",
            details={"field": "tickers", "count": len(cleaned)},
        )
    return cleaned


def fetch_broker_holdings(broker_name: str) -> List[dict]:
    return [
        {"ticker": t, "quantity": q, "cost_basis": cost, "current_value": value}
        for t, q, cost, value in MOCK_BROKER_HOLDINGS.get(broker_name, [])
    ]


class PortfolioService:
    """Portfolio operations for one database session."""

    def __init__(self, db: Session, limiter: RateLimiter = portfolio_sync_limiter):
        self.repo = PortfolioRepository(db)
        self.limiter = limiter

    def save_manual(self, user_id: str, tickers: List[str]) -> UserPortfolio:
        """Replace the user's manual holdings with ``tickers`` (quantity 1 each)."""
        cleaned = normalize_manual_tickers(tickers)
        portfolio = self.repo.get_or_create(user_id, MANUAL_BROKER)
        self.repo.replace_holdings(portfolio, [{"ticker": t, "quantity": 1} for t in cleaned])
        self.repo.mark_synced(portfolio)
        logger.info(f"Saved {len(cleaned)} manual holdings for user {user_id}")
        return portfolio

    def holdings(self, user_id: str) -> Dict:
        portfolios = self.repo.list_for_user(user_id)
        tickers = {h.ticker for p in portfolios for h in p.holdings}
        summary = {
            "total_portfolios": len(portfolios),
            "total_holdings": sum(len(p.holdings) for p in portfolios),
            "unique_tickers": len(tickers),
            "connected_brokers": [p.broker_name for p in portfolios if p.connection_status == "connected"],
        }
        return {"portfolios": portfolios, "summary": summary}

    def disconnect(self, user_id: str, portfolio_id: int) -> None:
        self.repo.delete(user_id, portfolio_id)

    def sync(self, user_id: str, portfolio_id: Optional[int] = None) -> List[UserPortfolio]:
        """
        Refresh broker holdings for one portfolio, or all of the user's.

        Raises:
            RateLimitError: User synced within the window
            RecordNotFoundError: Nothing to sync
        """
        self.limiter.acquire(f"portfolio-sync:{user_id}")

        if portfolio_id is not None:
            portfolios = [self.repo.get_owned(user_id, portfolio_id)]
        else:
            portfolios = self.repo.list_for_user(user_id)
        if not portfolios:
            raise RecordNotFoundError("No portfolios found to sync")

        synced = []
        for portfolio in portfolios:
            if portfolio.broker_name == MANUAL_BROKER or portfolio.connection_status != "connected":
                continue
            holdings = fetch_broker_holdings(portfolio.broker_name)
            self.repo.replace_holdings(portfolio, holdings)
            self.repo.mark_synced(portfolio)
            synced.append(portfolio)
            audit_log.info(
                "portfolio_synced",
                user_id=user_id,
                portfolio_id=portfolio.id,
                broker=portfolio.broker_name,
                holdings=len(holdings),
            )
        return synced
