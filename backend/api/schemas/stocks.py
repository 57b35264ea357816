"""Stock catalog schemas"""
from api.schemas.common import CamelModel


class StockResponse(CamelModel):
    ticker: str
    name: str
    type: str
    sector: str


class StockListResponse(CamelModel):
    success: bool = True
    data: list[StockResponse]
    count: int


class StockDetailResponse(CamelModel):
    success: bool = True
    data: StockResponse


class RecentSearchesResponse(CamelModel):
    success: bool = True
    data: list[str]
