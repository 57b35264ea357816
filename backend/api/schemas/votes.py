"""Vote schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from api.schemas.common import CamelModel


class VoteCreate(CamelModel):
    event_id: int
    vote: str


class VoteResponse(CamelModel):
    id: int
    user_id: str
    event_id: int
    vote: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VoteAggregateResponse(BaseModel):
    """Tally keys stay as the client reads them (no_comment is not camelCased)"""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    event_id: int = Field(alias="eventId")
    yes: int
    no: int
    no_comment: int
    total: int


class VoteSubmission(CamelModel):
    vote: VoteResponse
    aggregate: VoteAggregateResponse


class VoteSubmissionResponse(CamelModel):
    success: bool = True
    data: VoteSubmission


class EventVoteSummary(CamelModel):
    aggregate: VoteAggregateResponse
    user_vote: Optional[str] = None


class EventVoteSummaryResponse(CamelModel):
    success: bool = True
    data: EventVoteSummary


class UserVotesResponse(CamelModel):
    success: bool = True
    data: list[VoteResponse]
