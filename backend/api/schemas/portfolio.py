"""Portfolio schemas (snake_case on the wire)"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ManualPortfolioRequest(BaseModel):
    tickers: list[str] = Field(..., min_length=1)


class DisconnectRequest(BaseModel):
    portfolio_id: int


class SyncRequest(BaseModel):
    portfolio_id: Optional[int] = None


class HoldingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticker: str
    quantity: float
    cost_basis: Optional[float] = None
    current_value: Optional[float] = None
    last_updated: Optional[datetime] = None


class PortfolioResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    broker_name: str
    connection_status: str
    last_sync_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    holdings: list[HoldingResponse] = []


class HoldingsSummary(BaseModel):
    total_portfolios: int
    total_holdings: int
    unique_tickers: int
    connected_brokers: list[str]


class HoldingsResponse(BaseModel):
    success: bool = True
    portfolios: list[PortfolioResponse]
    summary: HoldingsSummary


class ManualPortfolioResponse(BaseModel):
    success: bool = True
    portfolio_id: int
    holdings: list[HoldingResponse]


class DisconnectResponse(BaseModel):
    success: bool = True
    message: str
    broker_name: str


class SyncResponse(BaseModel):
    success: bool = True
    holdings: list[HoldingResponse]
    last_sync_at: Optional[datetime] = None
    portfolios_synced: int
