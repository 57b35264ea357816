"""
Tests for the event filter and search predicate.
"""

import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from stockcal.domain.events import EventRecord
from stockcal.domain.filters import ALL, EventFilters, event_matches, filter_events
from stockcal.utils.errors import ValidationError


def make_event(event_id, **overrides) -> EventRecord:
    data = {
        "id": event_id,
        "title": f"Event {event_id}",
        "description": "",
        "event_date": datetime(2025, 11, 10, 14, 0, tzinfo=timezone.utc),
        "category": "earnings",
        "impact_scope": "single_stock",
        "primary_ticker": None,
        "affected_tickers": [],
        "is_fixed_date": True,
    }
    data.update(overrides)
    return EventRecord(**data)


@pytest.fixture
def catalog():
    return [
        make_event(1, title="FOMC Interest Rate Decision", category="fed_policy", impact_scope="market"),
        make_event(2, title="Apple Q4 2025 Earnings", primary_ticker="AAPL", affected_tickers=["AAPL"]),
        make_event(3, title="Tesla Q3 2025 Earnings", primary_ticker="TSLA", affected_tickers=["TSLA"]),
        make_event(
            4,
            title="SEC Crypto Regulation Announcement",
            description="New rules for retail brokerages like Robinhood",
            category="regulatory",
            impact_scope="sector",
            primary_ticker="HOOD",
            affected_tickers=["HOOD", "COIN"],
        ),
        make_event(5, title="CPI Inflation Report", category="economic_data", impact_scope="market"),
    ]


def ids(events):
    return [e.id for e in events]


class TestEventFilters:
    """Construction and validation of the structured filters"""

    def test_defaults_match_everything(self):
        filters = EventFilters()
        assert filters.category == ALL
        assert filters.scope == ALL
        assert filters.ticker == ""

    def test_from_params_treats_blanks_as_all(self):
        filters = EventFilters.from_params(category="", scope=None, ticker="  ")
        assert filters == EventFilters()

    def test_invalid_category_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            EventFilters(category="dividends")
        assert exc_info.value.details["field"] == "category"

    def test_invalid_scope_rejected(self):
        with pytest.raises(ValidationError):
            EventFilters(scope="planet")


class TestTickerFilter:
    """Ticker filter semantics"""

    def test_market_events_match_any_ticker(self, catalog):
        """A market-scope event with no tickers still shows under a ticker filter"""
        result = filter_events(catalog, EventFilters(ticker="AAPL"))
        assert ids(result.events) == [1, 2, 5]

    def test_ticker_match_is_case_insensitive_substring(self, catalog):
        result = filter_events(catalog, EventFilters(ticker="coi"))
        assert 4 in ids(result.events)
        assert 3 not in ids(result.events)

    def test_primary_ticker_matches(self, catalog):
        result = filter_events(catalog, EventFilters(ticker="tsla", scope="single_stock"))
        assert ids(result.events) == [3]


class TestSearchQuery:
    """Free-text search over title, description and tickers"""

    def test_title_search(self, catalog):
        assert ids(filter_events(catalog, query="earnings").events) == [2, 3]

    def test_description_search(self, catalog):
        assert ids(filter_events(catalog, query="robinhood").events) == [4]

    def test_ticker_search(self, catalog):
        assert ids(filter_events(catalog, query="HOOD").events) == [4]

    def test_blank_query_matches_all(self, catalog):
        assert filter_events(catalog, query="   ").count == len(catalog)


class TestCombinedFiltering:
    """All criteria combine with AND and keep catalog order"""

    def test_category_and_query(self, catalog):
        result = filter_events(catalog, EventFilters(category="earnings"), query="apple")
        assert ids(result.events) == [2]

    def test_scope_market(self, catalog):
        result = filter_events(catalog, EventFilters(scope="market"))
        assert ids(result.events) == [1, 5]

    def test_no_match_returns_empty(self, catalog):
        result = filter_events(catalog, EventFilters(category="gov_policy"))
        assert result.events == []
        assert result.count == 0

    def test_filtering_is_idempotent(self, catalog):
        filters = EventFilters(ticker="HOOD")
        once = filter_events(catalog, filters, "regulation").events
        twice = filter_events(once, filters, "regulation").events
        assert ids(once) == ids(twice) == [4]

    def test_event_matches_agrees_with_filter_events(self, catalog):
        filters = EventFilters(scope="sector")
        expected = [e.id for e in catalog if event_matches(e, filters)]
        assert ids(filter_events(catalog, filters).events) == expected
