"""Outcome of a voting permission evaluation."""

from __future__ import annotations

from pydantic import BaseModel


class PermissionDecision(BaseModel):
    """Whether a vote is allowed and, if not, which rule refused it."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> PermissionDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> PermissionDecision:
        return cls(allowed=False, reason=reason)
