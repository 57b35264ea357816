"""Event impact votes router"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_db
from api.ratelimit import limiter, default_limit
from api.schemas.votes import (
    EventVoteSummaryResponse,
    UserVotesResponse,
    VoteAggregateResponse,
    VoteCreate,
    VoteResponse,
    VoteSubmission,
    VoteSubmissionResponse,
)
from stockcal.db.repositories import VoteRepository

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("", response_model=VoteSubmissionResponse)
@limiter.limit(default_limit)
async def submit_vote(
    request: Request,
    data: VoteCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Record (or change) the caller's vote and return the recounted tally"""
    vote, aggregate = VoteRepository(db).submit_vote(user_id, data.event_id, data.vote)
    return VoteSubmissionResponse(
        data=VoteSubmission(
            vote=VoteResponse.model_validate(vote),
            aggregate=VoteAggregateResponse(**aggregate.to_dict()),
        )
    )


@router.get("", response_model=EventVoteSummaryResponse | UserVotesResponse)
@limiter.limit(default_limit)
async def get_votes(
    request: Request,
    event_id: Optional[int] = Query(None, alias="eventId"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Tally and the caller's vote for one event, or every vote the caller cast"""
    repo = VoteRepository(db)
    if event_id is None:
        return UserVotesResponse(
            data=[VoteResponse.model_validate(v) for v in repo.list_user_votes(user_id)]
        )

    aggregate = repo.get_aggregate(event_id)
    user_vote = repo.get_user_vote(user_id, event_id)
    return EventVoteSummaryResponse(
        data={
            "aggregate": VoteAggregateResponse(**aggregate.to_dict()),
            "user_vote": user_vote.vote if user_vote else None,
        }
    )
