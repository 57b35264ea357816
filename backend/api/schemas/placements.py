"""Placement schemas"""
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from api.schemas.common import CamelModel
from stockcal.utils.datetime import to_iso_date
from stockcal.utils.errors import InvalidDateError


class PlacementCreate(CamelModel):
    event_id: int
    date: str
    stock_ticker: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        try:
            return to_iso_date(v)
        except InvalidDateError:
            raise ValueError("Invalid date format, expected YYYY-MM-DD")

    @field_validator("stock_ticker")
    @classmethod
    def normalize_ticker(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip().upper()
        return v or None


class PlacementResponse(CamelModel):
    id: int
    user_id: str
    event_id: int
    date: str
    stock_ticker: Optional[str] = None
    created_at: Optional[datetime] = None


class PlacementResult(CamelModel):
    success: bool = True
    data: PlacementResponse
    message: Optional[str] = None


class PlacementListResponse(CamelModel):
    success: bool = True
    data: list[PlacementResponse]
