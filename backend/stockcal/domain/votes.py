"""Impact vote values and the per-event tally."""

from typing import Iterable

from pydantic import BaseModel, Field

from stockcal.utils.errors import InvalidVoteError

VALID_VOTES = ("yes", "no", "no_comment")


def validate_vote(value) -> str:
    """Return the vote value, or raise InvalidVoteError."""
    if value not in VALID_VOTES:
        raise InvalidVoteError(
            "Vote must be one of: yes, no, no_comment",
            details={"field": "vote", "value": value, "allowed": list(VALID_VOTES)},
        )
    return value


class VoteAggregate(BaseModel):
    """Counts of each vote value for one event. total is always the sum."""

    event_id: int = Field(..., serialization_alias="eventId")
    yes: int = 0
    no: int = 0
    no_comment: int = 0

    @property
    def total(self) -> int:
        return self.yes + self.no + self.no_comment

    @classmethod
    def from_votes(cls, event_id: int, votes: Iterable[str]) -> "VoteAggregate":
        counts = {v: 0 for v in VALID_VOTES}
        for vote in votes:
            if vote in counts:
                counts[vote] += 1
        return cls(event_id=event_id, **counts)

    def to_dict(self) -> dict:
        return {
            "eventId": self.event_id,
            "yes": self.yes,
            "no": self.no,
            "no_comment": self.no_comment,
            "total": self.total,
        }
