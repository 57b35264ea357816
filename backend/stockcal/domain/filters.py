"""
Event filter and search predicate.

One predicate decides whether an event is visible for a given set of
filters and a free-text query. The event pool, the calendar grid, the
per-ticker calendar and the /events endpoint all go through it.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from stockcal.domain.events import EventRecord, VALID_CATEGORIES, VALID_SCOPES
from stockcal.utils.errors import ValidationError

ALL = "all"


@dataclass(frozen=True)
class EventFilters:
    """Structured filters selected in the event pool."""

    category: str = ALL
    scope: str = ALL
    ticker: str = ""

    def __post_init__(self):
        if self.category != ALL and self.category not in VALID_CATEGORIES:
            raise ValidationError(
                f"Invalid category filter '{self.category}'",
                details={"field": "category", "allowed": sorted(VALID_CATEGORIES | {ALL})},
            )
        if self.scope != ALL and self.scope not in VALID_SCOPES:
            raise ValidationError(
                f"Invalid scope filter '{self.scope}'",
                details={"field": "scope", "allowed": sorted(VALID_SCOPES | {ALL})},
            )

    @classmethod
    def from_params(
        cls,
        category: Optional[str] = None,
        scope: Optional[str] = None,
        ticker: Optional[str] = None,
    ) -> "EventFilters":
        """Build filters from optional query parameters, blanks meaning 'all'."""
        return cls(
            category=(category or ALL).strip() or ALL,
            scope=(scope or ALL).strip() or ALL,
            ticker=(ticker or "").strip(),
        )


@dataclass
class FilterResult:
    events: List[EventRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.events)


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def matches_ticker(event: EventRecord, ticker: str) -> bool:
    """Ticker filter; market-wide events match any ticker."""
    needle = ticker.strip().lower()
    if not needle:
        return True
    if event.is_market_wide:
        return True
    if _contains(event.primary_ticker, needle):
        return True
    return any(_contains(t, needle) for t in event.affected_tickers)


def matches_query(event: EventRecord, query: str) -> bool:
    """Free-text search over title, description and tickers."""
    needle = query.strip().lower()
    if not needle:
        return True
    return (
        _contains(event.title, needle)
        or _contains(event.description, needle)
        or _contains(event.primary_ticker, needle)
        or any(_contains(t, needle) for t in event.affected_tickers)
    )


def event_matches(event: EventRecord, filters: EventFilters, query: str = "") -> bool:
    """True when the event passes search, category, scope and ticker."""
    matches_category = filters.category == ALL or event.category == filters.category
    matches_scope = filters.scope == ALL or event.impact_scope == filters.scope
    return (
        matches_query(event, query)
        and matches_category
        and matches_scope
        and matches_ticker(event, filters.ticker)
    )


def filter_events(
    events: Iterable[EventRecord],
    filters: Optional[EventFilters] = None,
    query: str = "",
) -> FilterResult:
    """
    Filter events, preserving catalog order.

    Args:
        events: Catalog events in display order
        filters: Structured filters (defaults to no filtering)
        query: Free-text search string

    Returns:
        FilterResult with the visible events and their count
    """
    filters = filters or EventFilters()
    return FilterResult(events=[e for e in events if event_matches(e, filters, query or "")])
