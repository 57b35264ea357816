"""Onboarding questionnaire and stock recommendations router"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_db
from api.ratelimit import limiter, default_limit
from api.schemas.onboarding import (
    PreferenceGetResponse,
    PreferenceResponse,
    PreferenceSaveResponse,
    RecommendationResponse,
    RecommendationsResponse,
)
from api.utils.exceptions import ResourceNotFoundException
from stockcal.config import settings
from stockcal.db.repositories import PreferenceRepository, StockRepository
from stockcal.domain.recommendations import QuestionnaireData, Stock, generate_recommendations

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


def _recommend(db: Session, preferences: QuestionnaireData) -> list[RecommendationResponse]:
    catalog = [Stock.model_validate(s) for s in StockRepository(db).get_all()]
    ranked = generate_recommendations(
        preferences,
        catalog,
        max_results=settings.recommendation_max_results,
        min_results=settings.recommendation_min_results,
    )
    return [
        RecommendationResponse(
            ticker=rec.ticker,
            name=rec.name,
            sector=rec.sector,
            type=rec.type,
            score=rec.score,
            reasons=rec.reasons,
            score_percentage=rec.score_percentage,
            match_quality=rec.match_quality,
        )
        for rec in ranked
    ]


@router.post("/recommendations", response_model=RecommendationsResponse)
@limiter.limit(default_limit)
async def recommend(request: Request, preferences: QuestionnaireData, db: Session = Depends(get_db)):
    """Score the stock catalog against questionnaire answers (nothing is saved)"""
    return RecommendationsResponse(recommendations=_recommend(db, preferences))


@router.get("/recommendations", response_model=RecommendationsResponse)
@limiter.limit(default_limit)
async def recommend_from_saved(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Recommendations for the caller's most recently saved questionnaire"""
    saved = PreferenceRepository(db).get_latest(user_id)
    if not saved:
        raise ResourceNotFoundException("Preferences")
    preferences = PreferenceRepository.to_questionnaire(saved)
    return RecommendationsResponse(recommendations=_recommend(db, preferences), preferences=preferences)


@router.post("/preferences", response_model=PreferenceSaveResponse)
@limiter.limit(default_limit)
async def save_preferences(
    request: Request,
    preferences: QuestionnaireData,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    saved = PreferenceRepository(db).save(user_id, preferences)
    return PreferenceSaveResponse(preference=PreferenceResponse.model_validate(saved))


@router.get("/preferences", response_model=PreferenceGetResponse)
@limiter.limit(default_limit)
async def get_preferences(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    saved = PreferenceRepository(db).get_latest(user_id)
    if not saved:
        raise ResourceNotFoundException("Preferences")
    return PreferenceGetResponse(preferences=PreferenceResponse.model_validate(saved))
