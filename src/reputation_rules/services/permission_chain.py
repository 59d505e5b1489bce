"""Ordered voting permission chains.

The upvote and downvote chains are declared once, here. Category policy runs
first, then the checks specific to the vote direction, then the checks both
directions share. Shared checks are listed in both chains and run again for
each direction. Evaluation stops at the first check that denies.
"""

from __future__ import annotations

import logging

from reputation_rules.core.errors import EvaluationError
from reputation_rules.core.settings import Settings
from reputation_rules.db.time import utcnow
from reputation_rules.schemas.permission import PermissionDecision
from reputation_rules.schemas.post import PostRef
from reputation_rules.schemas.user import Voter
from reputation_rules.schemas.vote import VoteType

from .permissions import (
    Clock,
    HasDownvotedTooManyTimesToday,
    HasEnoughPostsToDownvote,
    HasEnoughPostsToUpvote,
    HasEnoughReputationToDownvote,
    HasVotedAuthorTooManyTimesThisMonth,
    HasVotedTooManyPostsInThread,
    HasVotedTooManyTimesToday,
    IsOldEnoughToDownvote,
    IsOldEnoughToUpvote,
    PostIsNotTooOld,
    VotingAllowedInCategory,
    VotingPermission,
)
from .vote_log import VoteLogStore

logger = logging.getLogger(__name__)

UPVOTE_CHAIN: tuple[type[VotingPermission], ...] = (
    VotingAllowedInCategory,
    HasEnoughPostsToUpvote,
    IsOldEnoughToUpvote,
    HasVotedTooManyPostsInThread,
    HasVotedAuthorTooManyTimesThisMonth,
    HasVotedTooManyTimesToday,
    PostIsNotTooOld,
)

DOWNVOTE_CHAIN: tuple[type[VotingPermission], ...] = (
    VotingAllowedInCategory,
    HasDownvotedTooManyTimesToday,
    HasEnoughPostsToDownvote,
    IsOldEnoughToDownvote,
    HasEnoughReputationToDownvote,
    HasVotedTooManyPostsInThread,
    HasVotedAuthorTooManyTimesThisMonth,
    HasVotedTooManyTimesToday,
    PostIsNotTooOld,
)


class PermissionChainEvaluator:
    """Run the permission chain for a vote direction and report the first denial."""

    def __init__(self, config: Settings, vote_log: VoteLogStore, clock: Clock = utcnow) -> None:
        # One instance per check, shared by both chains
        instances: dict[type[VotingPermission], VotingPermission] = {}
        for permission_cls in (*UPVOTE_CHAIN, *DOWNVOTE_CHAIN):
            if permission_cls not in instances:
                instances[permission_cls] = permission_cls(config, vote_log, clock)
        self.upvote_chain = tuple(instances[cls] for cls in UPVOTE_CHAIN)
        self.downvote_chain = tuple(instances[cls] for cls in DOWNVOTE_CHAIN)

    def chain_for(self, vote_type: VoteType) -> tuple[VotingPermission, ...]:
        if vote_type is VoteType.UPVOTE:
            return self.upvote_chain
        return self.downvote_chain

    async def evaluate(
        self, voter: Voter, post: PostRef, vote_type: VoteType
    ) -> PermissionDecision:
        """Return the decision of the first denying check, or allow.

        Raises:
            EvaluationError: A check failed to complete. The chain is aborted
                and no decision is made.
        """
        for permission in self.chain_for(vote_type):
            try:
                decision = await permission.evaluate(voter, post)
            except Exception as exc:
                logger.warning(
                    "Permission check %s failed for voter %s on post %s: %s",
                    permission.name,
                    voter.uid,
                    post.pid,
                    exc,
                )
                raise EvaluationError(permission.name) from exc
            if not decision.allowed:
                logger.info(
                    "Voter %s may not %s post %s: %s",
                    voter.uid,
                    vote_type.value,
                    post.pid,
                    decision.reason,
                )
                return decision
        return PermissionDecision.allow()
