"""Vote-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from reputation_rules.db.time import utcnow


class VoteType(str, Enum):
    """Direction of a vote."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"

    @property
    def opposite(self) -> VoteType:
        return VoteType.DOWNVOTE if self is VoteType.UPVOTE else VoteType.UPVOTE


class Vote(BaseModel):
    """A vote cast by one user on another user's post.

    ``amount`` is the extra weight the vote carried when it was cast. A vote is
    stored with ``undone=False`` and flipped to ``True`` once when undone.
    """

    type: VoteType
    voter_id: int
    author_id: int
    topic_id: int
    post_id: int
    amount: int = 0
    undone: bool = False
    timestamp: datetime = Field(default_factory=utcnow)

    def to_store_mapping(self) -> dict[str, Any]:
        """Return the flat mapping persisted as the vote log hash."""
        return self.model_dump(mode="json")


# Persisted form of a vote, stored at the composite key of
# (voter_id, author_id, topic_id, post_id).
VoteLogRecord = Vote
