"""
Questionnaire-driven stock recommendations.

Scores every catalog stock against the onboarding answers using four
additive rule categories:

    sector match        40 pts max
    risk tolerance      30 pts max
    investment timeline 20 pts max
    portfolio strategy  10 pts max

The symbol lists behind each category are configuration data
(RecommendationTables) so they can change without touching the scoring.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

ALL_SECTORS = "All sectors / Not sure yet"
MAX_SELECTED_SECTORS = 3
MAX_SCORE = 100

SECTOR_OPTIONS = (
    "Technology",
    "Financial Services",
    "Healthcare",
    "Energy",
    "Consumer Goods",
    "Automotive",
    "Cryptocurrency",
    "Industrials",
    "Communication Services",
    ALL_SECTORS,
)

CHECK_FREQUENCIES = ("multiple_daily", "daily", "few_weekly", "weekly", "monthly")
PORTFOLIO_STRATEGIES = ("celebrity", "diy", "mix")
ORDINAL_CHOICES = ("1", "2", "3", "4", "5")

SECTOR_MATCH_PREFIX = "Matches your interest in"


@dataclass(frozen=True)
class RecommendationTables:
    """Ticker categorization used by the scoring rules."""

    conservative: FrozenSet[str]
    moderate: FrozenSet[str]
    aggressive: FrozenSet[str]
    day_trading: FrozenSet[str]
    long_term: FrozenSet[str]
    trending: FrozenSet[str]
    # UI sector label -> catalog sector strings
    sector_mapping: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def catalog_sectors_for(self, label: str) -> Tuple[str, ...]:
        return self.sector_mapping.get(label, (label,))


DEFAULT_TABLES = RecommendationTables(
    conservative=frozenset({"AAPL", "MSFT", "JNJ", "PG", "KO", "PFE", "V", "MA", "JPM"}),
    moderate=frozenset({"GOOGL", "AMZN", "META", "NFLX", "CRM", "ORCL", "ADBE", "BAC"}),
    aggressive=frozenset({"TSLA", "NVDA", "AMD", "BTC", "ETH", "HOOD"}),
    day_trading=frozenset({"TSLA", "NVDA", "AMD", "BTC", "ETH", "META", "HOOD"}),
    long_term=frozenset({"AAPL", "MSFT", "JNJ", "PG", "KO", "JPM", "V", "MA", "BRK.B"}),
    trending=frozenset({"TSLA", "NVDA", "BTC", "ETH", "AAPL", "META", "AMD", "HOOD"}),
    sector_mapping={
        "Technology": ("Technology",),
        "Financial Services": ("Financial",),
        "Healthcare": ("Healthcare",),
        "Energy": ("Energy",),
        "Consumer Goods": ("Consumer Goods", "Consumer Defensive", "Consumer Cyclical"),
        "Automotive": ("Automotive",),
        "Cryptocurrency": ("Cryptocurrency",),
        "Industrials": ("Industrials",),
        "Communication Services": ("Communication Services",),
    },
)


class QuestionnaireData(BaseModel):
    """Onboarding answers. Accepts the camelCase keys the web client sends."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    sectors: List[str] = Field(..., min_length=1)
    investment_timeline: str = Field(..., alias="investmentTimeline")
    check_frequency: str = Field(..., alias="checkFrequency")
    risk_tolerance: str = Field(..., alias="riskTolerance")
    portfolio_strategy: str = Field(..., alias="portfolioStrategy")

    @field_validator("sectors")
    @classmethod
    def validate_sectors(cls, v: List[str]) -> List[str]:
        if ALL_SECTORS in v:
            if len(v) != 1:
                raise ValueError(f"'{ALL_SECTORS}' cannot be combined with other sectors")
            return v
        if len(v) > MAX_SELECTED_SECTORS:
            raise ValueError(f"Select at most {MAX_SELECTED_SECTORS} sectors")
        if len(set(v)) != len(v):
            raise ValueError("Sectors must not repeat")
        return v

    @field_validator("investment_timeline", "risk_tolerance", mode="before")
    @classmethod
    def validate_ordinal(cls, v) -> str:
        v = str(v).strip()
        if v not in ORDINAL_CHOICES:
            raise ValueError("Must be an integer from 1 to 5")
        return v

    @field_validator("check_frequency")
    @classmethod
    def validate_check_frequency(cls, v: str) -> str:
        if v not in CHECK_FREQUENCIES:
            raise ValueError(f"Must be one of: {', '.join(CHECK_FREQUENCIES)}")
        return v

    @field_validator("portfolio_strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        if v not in PORTFOLIO_STRATEGIES:
            raise ValueError(f"Must be one of: {', '.join(PORTFOLIO_STRATEGIES)}")
        return v


class Stock(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ticker: str
    name: str
    sector: str
    type: str = "stock"


class StockRecommendation(Stock):
    score: int = 0
    reasons: List[str] = Field(default_factory=list)

    @property
    def score_percentage(self) -> int:
        return score_percentage(self.score)

    @property
    def match_quality(self) -> str:
        return match_quality(self.score)

    def has_sector_match(self) -> bool:
        return any(r.startswith(SECTOR_MATCH_PREFIX) for r in self.reasons)


def _award(rec: StockRecommendation, points: int, reason: Optional[str] = None) -> None:
    rec.score += points
    if reason:
        rec.reasons.append(reason)


def _score_sector(rec: StockRecommendation, sectors: List[str], tables: RecommendationTables) -> None:
    if ALL_SECTORS in sectors:
        _award(rec, 20, "Matches your broad sector interest")
        return
    for label in sectors:
        if any(mapped in rec.sector for mapped in tables.catalog_sectors_for(label)):
            _award(rec, 40, f"{SECTOR_MATCH_PREFIX} {label}")
            return


def _score_risk(rec: StockRecommendation, risk: int, tables: RecommendationTables) -> None:
    ticker = rec.ticker
    if risk <= 2:
        if ticker in tables.conservative:
            _award(rec, 30, "Suitable for conservative risk tolerance")
    elif risk == 3:
        if ticker in tables.moderate:
            _award(rec, 30, "Balanced risk profile")
        elif ticker in tables.conservative:
            _award(rec, 20, "Stable investment option")
    else:
        if ticker in tables.aggressive:
            _award(rec, 30, "High growth potential for aggressive investors")
        elif ticker in tables.moderate:
            _award(rec, 15, "Growth opportunity")


def _score_timeline(rec: StockRecommendation, timeline: int, tables: RecommendationTables) -> None:
    if timeline <= 2:
        if rec.ticker in tables.day_trading:
            _award(rec, 20, "High volatility suitable for short-term trading")
    elif timeline == 3:
        _award(rec, 10)
    else:
        if rec.ticker in tables.long_term:
            _award(rec, 20, "Strong fundamentals for long-term holding")


def _score_strategy(rec: StockRecommendation, strategy: str, tables: RecommendationTables) -> None:
    trending = rec.ticker in tables.trending
    if strategy == "celebrity":
        if trending:
            _award(rec, 10, "Popular among investors and influencers")
    elif strategy == "diy":
        if rec.has_sector_match():
            _award(rec, 5)
    elif strategy == "mix":
        if trending:
            _award(rec, 5, "Trending stock")
        if rec.has_sector_match():
            _award(rec, 5)


def generate_recommendations(
    preferences: QuestionnaireData,
    all_stocks: Iterable[Stock],
    tables: RecommendationTables = DEFAULT_TABLES,
    max_results: int = 12,
    min_results: int = 8,
) -> List[StockRecommendation]:
    """
    Rank catalog stocks against the questionnaire.

    Deterministic: equal scores keep catalog order. Zero scores are dropped,
    the top ``max_results`` are kept, and when fewer than ``min_results``
    remain the list is backfilled from the next-highest excluded stocks.
    """
    recommendations: Dict[str, StockRecommendation] = {}
    for stock in all_stocks:
        # First occurrence of a ticker wins
        if stock.ticker not in recommendations:
            recommendations[stock.ticker] = StockRecommendation(
                ticker=stock.ticker, name=stock.name, sector=stock.sector, type=stock.type
            )

    risk = int(preferences.risk_tolerance)
    timeline = int(preferences.investment_timeline)

    for rec in recommendations.values():
        _score_sector(rec, preferences.sectors, tables)
        _score_risk(rec, risk, tables)
        _score_timeline(rec, timeline, tables)
        _score_strategy(rec, preferences.portfolio_strategy, tables)

    ranked = sorted(
        (rec for rec in recommendations.values() if rec.score > 0),
        key=lambda rec: rec.score,
        reverse=True,
    )

    top = ranked[:max_results]
    if len(top) < min_results:
        top.extend(ranked[max_results:][: min_results - len(top)])
    return top


def score_percentage(score: float) -> int:
    """Score as a 0-100 percentage (max possible score is exactly 100)."""
    return int(round(score / MAX_SCORE * 100))


def match_quality(score: float) -> str:
    percentage = score_percentage(score)
    if percentage >= 80:
        return "Excellent Match"
    elif percentage >= 60:
        return "Good Match"
    elif percentage >= 40:
        return "Moderate Match"
    return "Basic Match"
