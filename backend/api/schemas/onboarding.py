"""Onboarding questionnaire and recommendation schemas"""
from datetime import datetime
from typing import Optional

from api.schemas.common import CamelModel
from stockcal.domain.recommendations import QuestionnaireData


class RecommendationResponse(CamelModel):
    ticker: str
    name: str
    sector: str
    type: str
    score: int
    reasons: list[str]
    score_percentage: int
    match_quality: str


class RecommendationsResponse(CamelModel):
    recommendations: list[RecommendationResponse]
    preferences: Optional[QuestionnaireData] = None


class PreferenceResponse(CamelModel):
    id: int
    user_id: str
    sectors: list[str]
    investment_timeline: str
    check_frequency: str
    risk_tolerance: str
    portfolio_strategy: str
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PreferenceSaveResponse(CamelModel):
    success: bool = True
    preference: PreferenceResponse


class PreferenceGetResponse(CamelModel):
    preferences: PreferenceResponse
