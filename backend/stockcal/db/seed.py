"""
Seed the stock catalog, the default event catalog and a demo portfolio.

Usage:
    python -m stockcal.db.seed            # insert what is missing
    python -m stockcal.db.seed --reset    # clear catalog tables first
"""

import argparse
from datetime import datetime, timezone
from typing import Dict

from loguru import logger
from sqlalchemy.orm import Session

from stockcal.db.models import Event, Stock
from stockcal.db.repositories import EventRepository, PortfolioRepository, StockRepository
from stockcal.db.session import get_db_context, init_db
from stockcal.domain.events import EventInput
from stockcal.log_config import configure_logging
from stockcal.services.portfolio import fetch_broker_holdings

DEMO_USER_ID = "demo_user"

# (ticker, name, type, sector)
DEFAULT_STOCKS = [
    ("AAPL", "Apple Inc.", "stock", "Technology"),
    ("MSFT", "Microsoft Corporation", "stock", "Technology"),
    ("GOOGL", "Alphabet Inc. (Class A)", "stock", "Technology"),
    ("GOOG", "Alphabet Inc. (Class C)", "stock", "Technology"),
    ("AMZN", "Amazon.com Inc.", "stock", "Technology"),
    ("NVDA", "NVIDIA Corporation", "stock", "Technology"),
    ("META", "Meta Platforms Inc.", "stock", "Technology"),
    ("TSLA", "Tesla Inc.", "stock", "Automotive"),
    ("BRK.B", "Berkshire Hathaway Inc. (Class B)", "stock", "Financial"),
    ("JPM", "JPMorgan Chase & Co.", "stock", "Financial"),
    ("V", "Visa Inc.", "stock", "Financial"),
    ("MA", "Mastercard Incorporated", "stock", "Financial"),
    ("BAC", "Bank of America Corporation", "stock", "Financial"),
    ("HOOD", "Robinhood Markets Inc.", "stock", "Financial"),
    ("NFLX", "Netflix Inc.", "stock", "Technology"),
    ("AMD", "Advanced Micro Devices Inc.", "stock", "Technology"),
    ("CRM", "Salesforce Inc.", "stock", "Technology"),
    ("ORCL", "Oracle Corporation", "stock", "Technology"),
    ("ADBE", "Adobe Inc.", "stock", "Technology"),
    ("JNJ", "Johnson & Johnson", "stock", "Healthcare"),
    ("PG", "Procter & Gamble Co.", "stock", "Consumer Goods"),
    ("KO", "The Coca-Cola Company", "stock", "Consumer Goods"),
    ("PFE", "Pfizer Inc.", "stock", "Healthcare"),
    ("XOM", "Exxon Mobil Corporation", "stock", "Energy"),
    ("CVX", "Chevron Corporation", "stock", "Energy"),
    ("BTC", "Bitcoin", "crypto", "Cryptocurrency"),
    ("ETH", "Ethereum", "crypto", "Cryptocurrency"),
    ("SPY", "SPDR S&P 500 ETF Trust", "etf", "Index Fund"),
    ("QQQ", "Invesco QQQ Trust", "etf", "Index Fund"),
    ("XLE", "Energy Select Sector SPDR Fund", "etf", "Sector Fund"),
]


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def _market(title, description, when, category="economic_data", fixed=True) -> Dict:
    return {
        "title": title,
        "description": description,
        "event_date": _at(when),
        "category": category,
        "impact_scope": "market",
        "affected_tickers": [],
        "is_fixed_date": fixed,
    }


def _earnings(ticker, title, description, when, affected=None) -> Dict:
    return {
        "title": title,
        "description": description,
        "event_date": _at(when),
        "category": "earnings",
        "impact_scope": "single_stock",
        "primary_ticker": ticker,
        "affected_tickers": affected or [ticker],
        "is_fixed_date": True,
    }


DEFAULT_EVENTS = [
    # Federal Reserve meetings
    _market(
        "FOMC Interest Rate Decision",
        "Federal Open Market Committee announces interest rate decision for November 2025. "
        "Market expects data-dependent approach with focus on inflation trends.",
        "2025-11-07T14:00:00", category="fed_policy",
    ),
    _market(
        "FOMC Interest Rate Decision",
        "Federal Open Market Committee announces final interest rate decision of 2025. "
        "Typically includes updated economic projections and dot plot.",
        "2025-12-18T14:00:00", category="fed_policy",
    ),
    _market(
        "FOMC Interest Rate Decision",
        "Federal Open Market Committee announces first interest rate decision of 2026. "
        "Key indicator for monetary policy direction.",
        "2026-01-29T14:00:00", category="fed_policy",
    ),
    # Economic data
    _market(
        "CPI Inflation Report - October",
        "Consumer Price Index for October 2025. Key inflation indicator watched by Fed for rate decisions.",
        "2025-11-13T08:30:00",
    ),
    _market(
        "PCE Inflation Report - October",
        "Personal Consumption Expenditures index, the Fed's preferred inflation gauge.",
        "2025-11-27T08:30:00",
    ),
    _market(
        "Jobs Report - November",
        "Non-farm payrolls and unemployment rate for November 2025.",
        "2025-12-06T08:30:00",
    ),
    _market(
        "Retail Sales Report - October",
        "US retail sales data for October 2025. Key consumer spending indicator ahead of holiday season.",
        "2025-11-16T08:30:00",
    ),
    _market(
        "GDP Q3 2025 Final Estimate",
        "Third and final estimate of Q3 2025 GDP growth.",
        "2025-11-21T08:30:00",
    ),
    _market(
        "Consumer Confidence Index",
        "November Consumer Confidence reading from Conference Board. Forward-looking economic indicator.",
        "2025-11-26T10:00:00",
    ),
    # Earnings
    _earnings("AAPL", "Apple Q4 2025 Earnings",
              "Apple Inc. reports fiscal Q4 2025 earnings. Analysts expect iPhone strength and Services growth.",
              "2025-10-31T16:00:00"),
    _earnings("MSFT", "Microsoft Q1 FY2026 Earnings",
              "Microsoft reports fiscal Q1 2026 earnings. Focus on Azure cloud growth and AI integration.",
              "2025-10-29T16:00:00"),
    _earnings("META", "Meta Q3 2025 Earnings",
              "Meta Platforms Q3 earnings call. Key metrics: DAU growth, Reality Labs losses, ad revenue trends.",
              "2025-10-30T16:00:00"),
    _earnings("AMZN", "Amazon Q3 2025 Earnings",
              "Amazon Q3 results. Focus on AWS growth, retail margins and Prime subscriber trends.",
              "2025-10-31T16:00:00"),
    _earnings("NVDA", "NVIDIA Q3 FY2026 Earnings",
              "NVIDIA fiscal Q3 2026 earnings. AI chip demand, data center revenue and guidance in focus.",
              "2025-11-20T16:00:00"),
    _earnings("GOOGL", "Alphabet Q3 2025 Earnings",
              "Google parent Alphabet reports Q3 results. YouTube ad revenue, Cloud growth and AI investments key.",
              "2025-11-05T16:00:00", affected=["GOOGL", "GOOG"]),
    _earnings("TSLA", "Tesla Q3 2025 Earnings",
              "Tesla Q3 earnings and production update. Vehicle delivery guidance and margin trends.",
              "2025-10-23T17:30:00"),
    _earnings("HOOD", "Robinhood Q3 2025 Earnings",
              "Robinhood Markets reports Q3 2025 earnings. Focus on trading volume, crypto revenue and monthly active users.",
              "2025-10-30T16:00:00"),
    # Movable events
    {
        "title": "SEC Crypto Regulation Announcement",
        "description": "SEC expected to announce new cryptocurrency trading regulations affecting retail "
                       "brokerages like Robinhood and Coinbase.",
        "event_date": _at("2025-11-12T10:00:00"),
        "category": "regulatory",
        "impact_scope": "sector",
        "primary_ticker": "HOOD",
        "affected_tickers": ["HOOD", "COIN"],
        "certainty_level": "speculative",
        "is_fixed_date": False,
    },
    {
        "title": "Robinhood Options Trading Expansion",
        "description": "Robinhood announces expansion of options trading features and new derivative products.",
        "event_date": _at("2025-11-05T09:00:00"),
        "category": "corporate_action",
        "impact_scope": "single_stock",
        "primary_ticker": "HOOD",
        "affected_tickers": ["HOOD"],
        "certainty_level": "speculative",
        "is_fixed_date": False,
    },
    {
        "title": "Fintech Innovation Summit",
        "description": "Annual fintech conference where Robinhood's CEO is expected to speak on retail trading trends.",
        "event_date": _at("2025-11-22T09:00:00"),
        "category": "corporate_action",
        "impact_scope": "sector",
        "primary_ticker": "HOOD",
        "affected_tickers": ["HOOD", "SQ", "PYPL"],
        "is_fixed_date": True,
    },
]


def seed_stocks(db: Session) -> int:
    repo = StockRepository(db)
    created = 0
    for ticker, name, type_, sector in DEFAULT_STOCKS:
        if repo.get_by_ticker(ticker):
            continue
        repo.create(ticker=ticker, name=name, sector=sector, type=type_)
        created += 1
    logger.info(f"Seeded {created} stocks")
    return created


def seed_events(db: Session) -> int:
    repo = EventRepository(db)
    created = 0
    for raw in DEFAULT_EVENTS:
        data = EventInput(**raw)
        if repo.exists(data.title, data.event_date):
            continue
        repo.create(data)
        created += 1
    logger.info(f"Seeded {created} events")
    return created


def seed_demo_portfolio(db: Session, user_id: str = DEMO_USER_ID) -> None:
    repo = PortfolioRepository(db)
    if repo.list_for_user(user_id):
        logger.info("Demo portfolio already exists. Skipping.")
        return
    portfolio = repo.get_or_create(user_id, "robinhood")
    repo.replace_holdings(portfolio, fetch_broker_holdings("robinhood"))
    repo.mark_synced(portfolio)
    logger.info(f"Created demo robinhood portfolio {portfolio.id} for {user_id}")


def seed_all(db: Session, reset: bool = False, with_portfolio: bool = True) -> None:
    if reset:
        db.query(Event).delete()
        db.query(Stock).delete()
        db.flush()
        logger.info("Cleared existing stocks and events")
    seed_stocks(db)
    seed_events(db)
    if with_portfolio:
        seed_demo_portfolio(db)


def main():
    parser = argparse.ArgumentParser(description="Seed the stock event calendar database")
    parser.add_argument("--reset", action="store_true", help="Delete existing stocks and events first")
    parser.add_argument("--no-portfolio", action="store_true", help="Skip the demo portfolio")
    args = parser.parse_args()

    configure_logging()
    init_db()
    with get_db_context() as db:
        seed_all(db, reset=args.reset, with_portfolio=not args.no_portfolio)
    logger.info("Seed complete")


if __name__ == "__main__":
    main()
