"""Month grid schemas"""
import datetime as dt

from api.schemas.common import CamelModel
from api.schemas.events import EventResponse


class DayCellResponse(CamelModel):
    date: dt.date
    in_month: bool
    is_today: bool
    default_events: list[EventResponse]
    placed_events: list[EventResponse]


class MonthGridResponse(CamelModel):
    year: int
    month: int
    visible_event_count: int
    weeks: list[list[DayCellResponse]]


class MonthGridEnvelope(CamelModel):
    success: bool = True
    data: MonthGridResponse
