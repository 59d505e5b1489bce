# src/reputation_rules/services/__init__.py
"""Voting rules services: permission chains, vote weight and the vote log."""

from .key_lock import KeyedLock
from .permission_chain import DOWNVOTE_CHAIN, UPVOTE_CHAIN, PermissionChainEvaluator
from .reputation import ReputationManager, get_reputation_manager
from .vote_log import VoteLogStore
from .weight import compute_extra_weight

__all__ = [
    "KeyedLock",
    "DOWNVOTE_CHAIN",
    "UPVOTE_CHAIN",
    "PermissionChainEvaluator",
    "ReputationManager",
    "get_reputation_manager",
    "VoteLogStore",
    "compute_extra_weight"
]
