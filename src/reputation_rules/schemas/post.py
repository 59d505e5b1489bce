"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from reputation_rules.db.time import utcnow

from .user import Author


class PostRef(BaseModel):
    """The post a vote targets, with its thread, category and author."""

    pid: int = Field(..., description="Post id.")
    tid: int = Field(..., description="Id of the thread containing the post.")
    uid: int = Field(..., description="Id of the post author.")
    cid: int = Field(..., description="Id of the category containing the thread.")
    timestamp: datetime = Field(default_factory=utcnow)

    @property
    def author(self) -> Author:
        return Author(uid=self.uid)
