"""Portfolio holdings router (mock brokerage)"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_db
from api.schemas.portfolio import (
    DisconnectRequest,
    DisconnectResponse,
    HoldingResponse,
    HoldingsResponse,
    ManualPortfolioRequest,
    ManualPortfolioResponse,
    PortfolioResponse,
    SyncRequest,
    SyncResponse,
)
from stockcal.services.portfolio import PortfolioService
from stockcal.utils.datetime import utcnow

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.post("/manual", response_model=ManualPortfolioResponse)
async def save_manual_portfolio(
    data: ManualPortfolioRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Replace the caller's manual holdings with the given tickers"""
    portfolio = PortfolioService(db).save_manual(user_id, data.tickers)
    return ManualPortfolioResponse(
        portfolio_id=portfolio.id,
        holdings=[HoldingResponse.model_validate(h) for h in portfolio.holdings],
    )


@router.get("/holdings", response_model=HoldingsResponse)
async def get_holdings(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    result = PortfolioService(db).holdings(user_id)
    return HoldingsResponse(
        portfolios=[PortfolioResponse.model_validate(p) for p in result["portfolios"]],
        summary=result["summary"],
    )


@router.delete("/disconnect", response_model=DisconnectResponse)
async def disconnect_portfolio(
    data: DisconnectRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    service = PortfolioService(db)
    broker_name = service.repo.get_owned(user_id, data.portfolio_id).broker_name
    service.disconnect(user_id, data.portfolio_id)
    return DisconnectResponse(message="Portfolio disconnected successfully", broker_name=broker_name)


@router.post("/sync", response_model=SyncResponse)
async def sync_portfolio(
    data: Optional[SyncRequest] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Refresh broker holdings; one sync per user per window"""
    synced = PortfolioService(db).sync(user_id, data.portfolio_id if data else None)
    holdings = [HoldingResponse.model_validate(h) for p in synced for h in p.holdings]
    return SyncResponse(holdings=holdings, last_sync_at=utcnow(), portfolios_synced=len(synced))
