"""Month calendar router"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_optional, get_db
from api.ratelimit import limiter, default_limit
from api.schemas.calendar import MonthGridEnvelope, MonthGridResponse
from stockcal.db.repositories import EventRepository
from stockcal.domain.calendar_grid import build_month_grid
from stockcal.domain.filters import EventFilters
from stockcal.services.placements import ServerPlacementStore

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/month", response_model=MonthGridEnvelope)
@limiter.limit(default_limit)
async def get_month(
    request: Request,
    year: int = Query(..., ge=1900, le=2200),
    month: int = Query(..., ge=1, le=12),
    category: Optional[str] = None,
    scope: Optional[str] = None,
    ticker: Optional[str] = None,
    q: Optional[str] = None,
    user_id: Optional[str] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """
    Month view with default and placed events.

    With a ticker the grid shows that ticker's calendar: events are filtered
    to the ticker and placements come from its per-ticker scope.
    """
    filters = EventFilters.from_params(category=category, scope=scope, ticker=ticker)
    events = EventRepository(db).get_records()

    placements = []
    if user_id:
        placements = ServerPlacementStore(db, user_id, filters.ticker or None).placements()

    grid = build_month_grid(year, month, events, placements, filters, q or "", today=date.today())
    return MonthGridEnvelope(data=MonthGridResponse.model_validate(grid))
