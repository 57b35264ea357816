"""
Date helpers shared by placements, the calendar grid and the API.

Placement dates are stored as ISO 'YYYY-MM-DD' strings so they compare
lexically in SQL range filters.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional

from stockcal.utils.errors import InvalidDateError


def to_calendar_date(value: Any) -> date:
    """
    Coerce a date-like value to a calendar date.

    Accepts date, datetime (date part is used) and ISO strings
    ('2025-11-07', '2025-11-07T14:00:00Z').

    Raises:
        InvalidDateError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise InvalidDateError(f"Invalid date: {value!r}", details={"value": str(value)})


def to_iso_date(value: Any) -> str:
    """Normalize a date-like value to 'YYYY-MM-DD'."""
    return to_calendar_date(value).isoformat()


def parse_optional_iso_date(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    return to_iso_date(value)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)
