"""Calendar placements router (server-side sync)"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_db
from api.ratelimit import limiter, default_limit
from api.schemas.placements import PlacementCreate, PlacementListResponse, PlacementResponse, PlacementResult
from api.utils.exceptions import InvalidInputException
from stockcal.db.repositories import ALL_CALENDARS, EventRepository, PlacementRepository
from stockcal.domain.events import EventRecord
from stockcal.domain.placements import ensure_placeable
from stockcal.utils.datetime import parse_optional_iso_date, to_iso_date

router = APIRouter(prefix="/calendar/placements", tags=["placements"])


def _calendar_scope(stock_ticker: Optional[str]):
    """Absent: every calendar; "null" or empty: global calendar; otherwise that ticker"""
    if stock_ticker is None:
        return ALL_CALENDARS
    if stock_ticker.strip().lower() in ("", "null"):
        return None
    return stock_ticker.strip().upper()


@router.get("", response_model=PlacementListResponse)
@limiter.limit(default_limit)
async def list_placements(
    request: Request,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    stock_ticker: Optional[str] = Query(None, alias="stockTicker"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get the caller's placements"""
    placements = PlacementRepository(db).list_for_user(
        user_id,
        start_date=parse_optional_iso_date(start_date),
        end_date=parse_optional_iso_date(end_date),
        stock_ticker=_calendar_scope(stock_ticker),
    )
    return PlacementListResponse(data=[PlacementResponse.model_validate(p) for p in placements])


@router.post("", response_model=PlacementResult, status_code=status.HTTP_201_CREATED)
@limiter.limit(default_limit)
async def create_placement(
    request: Request,
    response: Response,
    data: PlacementCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Place an event on a date; repeating the same placement returns the existing record"""
    event = EventRepository(db).get_or_raise(data.event_id)
    ensure_placeable(EventRecord.model_validate(event))

    placement, created = PlacementRepository(db).create(
        user_id, data.event_id, data.date, data.stock_ticker
    )
    if not created:
        response.status_code = status.HTTP_200_OK
        return PlacementResult(
            data=PlacementResponse.model_validate(placement),
            message="Placement already exists",
        )
    return PlacementResult(data=PlacementResponse.model_validate(placement))


@router.delete("", response_model=PlacementResult)
@limiter.limit(default_limit)
async def delete_placement(
    request: Request,
    id: Optional[int] = None,
    event_id: Optional[int] = Query(None, alias="eventId"),
    date: Optional[str] = None,
    stock_ticker: Optional[str] = Query(None, alias="stockTicker"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Remove a placement by id, or by event and date within one calendar"""
    repo = PlacementRepository(db)
    if id is not None:
        deleted = repo.delete_by_id(user_id, id)
    elif event_id is not None and date:
        ticker = (stock_ticker or "").strip().upper() or None
        deleted = repo.delete_matching(user_id, event_id, to_iso_date(date), ticker)
    else:
        raise InvalidInputException("Must provide id or eventId+date")
    return PlacementResult(data=PlacementResponse.model_validate(deleted))
