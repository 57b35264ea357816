"""Stock catalog router"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_current_user_optional, get_db, get_kv_store
from api.ratelimit import limiter, default_limit
from api.schemas.stocks import RecentSearchesResponse, StockDetailResponse, StockListResponse, StockResponse
from api.utils.exceptions import InvalidInputException, ResourceNotFoundException
from stockcal.config import settings
from stockcal.db.repositories import StockRepository
from stockcal.domain.placements import KeyValueStore
from stockcal.domain.recent_searches import RecentSearches

router = APIRouter(prefix="/stocks", tags=["stocks"])


@router.get("/search", response_model=StockListResponse)
@limiter.limit(default_limit)
async def search_stocks(
    request: Request,
    q: Optional[str] = None,
    user_id: Optional[str] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
    kv: KeyValueStore = Depends(get_kv_store),
):
    """Up to 10 stocks matching ticker or name, best matches first"""
    if q is None or not q.strip():
        raise InvalidInputException('Query parameter "q" is required', details={"field": "q"})

    results = StockRepository(db).search(q)
    if user_id and results and results[0].ticker.lower() == q.strip().lower():
        RecentSearches(kv, user_id, settings.recent_searches_limit).add(results[0].ticker)

    return StockListResponse(data=[StockResponse.model_validate(s) for s in results], count=len(results))


@router.get("/recent", response_model=RecentSearchesResponse)
async def list_recent_searches(
    user_id: str = Depends(get_current_user_id),
    kv: KeyValueStore = Depends(get_kv_store),
):
    return RecentSearchesResponse(data=RecentSearches(kv, user_id, settings.recent_searches_limit).list())


@router.delete("/recent", response_model=RecentSearchesResponse)
async def clear_recent_searches(
    user_id: str = Depends(get_current_user_id),
    kv: KeyValueStore = Depends(get_kv_store),
):
    RecentSearches(kv, user_id, settings.recent_searches_limit).clear()
    return RecentSearchesResponse(data=[])


@router.get("/{ticker}", response_model=StockDetailResponse)
@limiter.limit(default_limit)
async def get_stock(request: Request, ticker: str, db: Session = Depends(get_db)):
    stock = StockRepository(db).get_by_ticker(ticker)
    if not stock:
        raise ResourceNotFoundException("Stock", ticker.upper())
    return StockDetailResponse(data=StockResponse.model_validate(stock))
