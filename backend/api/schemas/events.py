"""Event schemas"""
from datetime import datetime
from typing import Optional

from api.schemas.common import CamelModel


class EventResponse(CamelModel):
    id: int
    title: str
    description: str = ""
    event_date: datetime
    category: str
    impact_scope: str
    primary_ticker: Optional[str] = None
    affected_tickers: list[str] = []
    certainty_level: str = "confirmed"
    source_url: Optional[str] = None
    is_fixed_date: bool = False


class EventListResponse(CamelModel):
    success: bool = True
    data: list[EventResponse]
    count: int
