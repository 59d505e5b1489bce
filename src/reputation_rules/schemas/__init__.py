"""
Pydantic schemas for votes, voters, posts and permission decisions.

These schemas define the structure of the data exchanged with callers and
persisted in the vote log.
"""

from .permission import PermissionDecision
from .post import PostRef
from .user import Author, Voter
from .vote import Vote, VoteLogRecord, VoteType

__all__ = [
    "PermissionDecision",
    "PostRef",
    "Author", "Voter",
    "Vote", "VoteLogRecord", "VoteType"
]
