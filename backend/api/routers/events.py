"""Events router"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from api.dependencies import get_db
from api.ratelimit import limiter, default_limit
from api.schemas.events import EventListResponse, EventResponse
from stockcal.db.repositories import EventRepository
from stockcal.domain.filters import EventFilters, filter_events
from stockcal.utils.datetime import parse_optional_iso_date

router = APIRouter(prefix="/events", tags=["events"])


@router.get(
    "",
    response_model=EventListResponse,
    summary="List catalog events",
    description="Catalog events in date order, narrowed by category, impact scope, ticker, "
                "free-text search and an inclusive date range. Market-wide events match any ticker.",
)
@limiter.limit(default_limit)
async def list_events(
    request: Request,
    category: Optional[str] = None,
    scope: Optional[str] = None,
    ticker: Optional[str] = None,
    q: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    filters = EventFilters.from_params(category=category, scope=scope, ticker=ticker)
    events = EventRepository(db).get_records(
        start_date=parse_optional_iso_date(start_date),
        end_date=parse_optional_iso_date(end_date),
    )
    result = filter_events(events, filters, q or "")
    return EventListResponse(
        data=[EventResponse.model_validate(e) for e in result.events],
        count=result.count,
    )
