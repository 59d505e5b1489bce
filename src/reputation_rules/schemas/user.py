"""User-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from reputation_rules.db.time import utcnow


class Author(BaseModel):
    """Owner of a post."""

    uid: int


class Voter(BaseModel):
    """Snapshot of the user casting a vote."""

    uid: int
    reputation: int = 0
    postcount: int = Field(default=0, ge=0)
    joindate: datetime = Field(default_factory=utcnow)
