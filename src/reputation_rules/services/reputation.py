"""Entry point used by vote-casting services.

``ReputationManager`` answers whether a vote is allowed, how much extra weight
it carries, and records or undoes it in the vote log.
"""

from __future__ import annotations

import logging

from reputation_rules.core.keys import LogKeyFormat
from reputation_rules.core.settings import Settings, settings
from reputation_rules.db.session import create_store
from reputation_rules.db.store import KeyValueStore
from reputation_rules.schemas.permission import PermissionDecision
from reputation_rules.schemas.post import PostRef
from reputation_rules.schemas.user import Author, Voter
from reputation_rules.schemas.vote import Vote, VoteLogRecord, VoteType

from .permission_chain import PermissionChainEvaluator
from .vote_log import VoteLogStore
from .weight import compute_extra_weight

logger = logging.getLogger(__name__)


class ReputationManager:
    """Gate, weigh and log votes."""

    def __init__(
        self,
        config: Settings,
        vote_log: VoteLogStore,
        evaluator: PermissionChainEvaluator | None = None,
    ) -> None:
        self.config = config
        self.vote_log = vote_log
        self.evaluator = evaluator or PermissionChainEvaluator(config, vote_log)

    async def evaluate_upvote_permission(self, voter: Voter, post: PostRef) -> PermissionDecision:
        """Return whether the voter may upvote the post.

        Raises:
            EvaluationError: The decision could not be made.
        """
        return await self.evaluator.evaluate(voter, post, VoteType.UPVOTE)

    async def evaluate_downvote_permission(
        self, voter: Voter, post: PostRef
    ) -> PermissionDecision:
        """Return whether the voter may downvote the post.

        Raises:
            EvaluationError: The decision could not be made.
        """
        return await self.evaluator.evaluate(voter, post, VoteType.DOWNVOTE)

    def compute_upvote_extra_weight(self, voter: Voter) -> int:
        extra_percentage, max_weight = self.config.upvote_weight_params
        weight = compute_extra_weight(voter.reputation, extra_percentage, max_weight)
        logger.debug(
            "Voter reputation: %s, upvote extra weight: %s", voter.reputation, weight
        )
        return weight

    def compute_downvote_extra_weight(self, voter: Voter) -> int:
        extra_percentage, max_weight = self.config.downvote_weight_params
        weight = compute_extra_weight(voter.reputation, extra_percentage, max_weight)
        logger.debug(
            "Voter reputation: %s, downvote extra weight: %s", voter.reputation, weight
        )
        return weight

    async def record_vote(self, vote: Vote) -> VoteLogRecord:
        return await self.vote_log.write(vote)

    async def undo_vote(self, vote: Vote) -> VoteLogRecord | None:
        """Undo a recorded vote; returns None if the vote was never recorded."""
        return await self.vote_log.undo(vote)

    async def find_vote_log(
        self, voter: Voter | Author, author: Voter | Author, post: PostRef
    ) -> VoteLogRecord | None:
        """Return the voter's recorded vote on the post, or None if there is none."""
        return await self.vote_log.lookup(voter.uid, author.uid, post.tid, post.pid)


def build_vote_log(config: Settings, store: KeyValueStore) -> VoteLogStore:
    """Return a vote log over ``store`` using the configured key layout."""
    return VoteLogStore(
        store,
        LogKeyFormat(config.key_prefix),
        serialize_writes=config.vote_log_serialize_writes,
    )


def get_reputation_manager(
    config: Settings | None = None, store: KeyValueStore | None = None
) -> ReputationManager:
    """Return a reputation manager wired to the configured store."""
    config = config or settings
    store = store if store is not None else create_store(config)
    return ReputationManager(config, build_vote_log(config, store))
