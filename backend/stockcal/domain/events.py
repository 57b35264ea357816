"""
Domain models for calendar events with Pydantic validation.

This module contains pure data models without database or external dependencies.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict


# Valid event categories (must match the event pool category selector)
VALID_CATEGORIES = {
    "earnings",
    "economic_data",
    "fed_policy",
    "gov_policy",
    "regulatory",
    "corporate_action",
    "macro_event",
}

VALID_SCOPES = {
    "single_stock",
    "sector",
    "market",
}

VALID_CERTAINTY_LEVELS = {"confirmed", "speculative"}


class EventInput(BaseModel):
    """Input model for creating catalog events (seed or admin process)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., max_length=5000)
    event_date: datetime = Field(...)
    category: str = Field(...)
    impact_scope: str = Field(...)
    primary_ticker: Optional[str] = Field(None, max_length=10)
    affected_tickers: List[str] = Field(default_factory=list)
    certainty_level: str = Field("confirmed")
    source_url: Optional[str] = Field(None, max_length=1000)
    is_fixed_date: bool = False

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Validate category is in allowed list."""
        v_lower = v.lower()
        if v_lower not in VALID_CATEGORIES:
            raise ValueError(
                f"Invalid category '{v}'. Must be one of: {sorted(VALID_CATEGORIES)}"
            )
        return v_lower

    @field_validator("impact_scope")
    @classmethod
    def validate_scope(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in VALID_SCOPES:
            raise ValueError(
                f"Invalid impact_scope '{v}'. Must be one of: {sorted(VALID_SCOPES)}"
            )
        return v_lower

    @field_validator("certainty_level")
    @classmethod
    def validate_certainty(cls, v: str) -> str:
        if v not in VALID_CERTAINTY_LEVELS:
            raise ValueError(f"Invalid certainty_level '{v}'")
        return v

    @field_validator("primary_ticker")
    @classmethod
    def normalize_primary_ticker(cls, v: Optional[str]) -> Optional[str]:
        """Normalize ticker to uppercase."""
        return v.upper() if v else None

    @field_validator("affected_tickers")
    @classmethod
    def normalize_affected_tickers(cls, v: List[str]) -> List[str]:
        return [t.strip().upper() for t in v if t and t.strip()]

    @model_validator(mode="after")
    def require_primary_ticker_for_single_stock(self) -> "EventInput":
        if self.impact_scope == "single_stock" and not self.primary_ticker:
            raise ValueError("single_stock events require a primary_ticker")
        return self


class EventRecord(BaseModel):
    """Catalog event as read from the database."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str = ""
    event_date: datetime
    category: str
    impact_scope: str
    primary_ticker: Optional[str] = None
    affected_tickers: List[str] = Field(default_factory=list)
    certainty_level: str = "confirmed"
    source_url: Optional[str] = None
    is_fixed_date: bool = False

    @field_validator("affected_tickers", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @property
    def calendar_date(self) -> date:
        """Native calendar day of the event."""
        return self.event_date.date()

    @property
    def is_market_wide(self) -> bool:
        return self.impact_scope == "market"
