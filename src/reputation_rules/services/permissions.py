"""Voting permission checks.

Each check is a small object answering one question about a voter and the
post they want to vote on. A check passes, denies with its ``reason`` code,
or raises when the data it needs cannot be read. Checks never write to the
vote log.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import ClassVar

from reputation_rules.core.settings import Settings
from reputation_rules.db.time import as_utc, utcnow
from reputation_rules.schemas.permission import PermissionDecision
from reputation_rules.schemas.post import PostRef
from reputation_rules.schemas.user import Voter
from reputation_rules.schemas.vote import VoteLogRecord, VoteType

from .vote_log import VoteLogStore

DAY = timedelta(days=1)
MONTH = timedelta(days=30)

Clock = Callable[[], datetime]


class VotingPermission(ABC):
    """A single named check in a voting permission chain."""

    name: ClassVar[str]
    reason: ClassVar[str]

    def __init__(self, config: Settings, vote_log: VoteLogStore, clock: Clock = utcnow) -> None:
        self.config = config
        self.vote_log = vote_log
        self.clock = clock

    @abstractmethod
    async def check(self, voter: Voter, post: PostRef) -> bool:
        """Return True if the voter passes this check for the post."""

    async def evaluate(self, voter: Voter, post: PostRef) -> PermissionDecision:
        if await self.check(voter, post):
            return PermissionDecision.allow()
        return PermissionDecision.deny(self.reason)

    def _age(self, moment: datetime) -> timedelta:
        return self.clock() - as_utc(moment)

    def _since(self, records: list[VoteLogRecord], window: timedelta) -> list[VoteLogRecord]:
        start = self.clock() - window
        return [record for record in records if as_utc(record.timestamp) >= start]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class VotingAllowedInCategory(VotingPermission):
    name = "voting_allowed_in_category"
    reason = "voting_disabled_in_category"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        return post.cid not in self.config.disabled_categories


class HasEnoughPostsToUpvote(VotingPermission):
    name = "has_enough_posts_to_upvote"
    reason = "not_enough_posts_to_upvote"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        return voter.postcount >= self.config.min_posts_to_upvote


class IsOldEnoughToUpvote(VotingPermission):
    name = "is_old_enough_to_upvote"
    reason = "account_too_new_to_upvote"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        return self._age(voter.joindate) >= timedelta(days=self.config.min_days_to_upvote)


class HasEnoughPostsToDownvote(VotingPermission):
    name = "has_enough_posts_to_downvote"
    reason = "not_enough_posts_to_downvote"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        return voter.postcount >= self.config.min_posts_to_downvote


class IsOldEnoughToDownvote(VotingPermission):
    name = "is_old_enough_to_downvote"
    reason = "account_too_new_to_downvote"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        return self._age(voter.joindate) >= timedelta(days=self.config.min_days_to_downvote)


class HasEnoughReputationToDownvote(VotingPermission):
    name = "has_enough_reputation_to_downvote"
    reason = "not_enough_reputation_to_downvote"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        return voter.reputation >= self.config.min_reputation_to_downvote


class HasDownvotedTooManyTimesToday(VotingPermission):
    """Passes while the voter's downvotes in the last day are under the limit."""

    name = "has_downvoted_too_many_times_today"
    reason = "too_many_downvotes_today"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        downvotes = await self.vote_log.votes_by_voter(voter.uid, VoteType.DOWNVOTE)
        return len(self._since(downvotes, DAY)) < self.config.max_downvotes_per_day


class HasVotedTooManyPostsInThread(VotingPermission):
    """Passes while the voter has voted on fewer posts of the thread than allowed."""

    name = "has_voted_too_many_posts_in_thread"
    reason = "too_many_votes_in_thread"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        count = await self.vote_log.count_thread_votes(voter.uid, post.tid)
        return count < self.config.max_votes_per_user_in_thread


class HasVotedAuthorTooManyTimesThisMonth(VotingPermission):
    """Passes while the voter's votes on the post author in the last 30 days are under the limit."""

    name = "has_voted_author_too_many_times_this_month"
    reason = "too_many_votes_to_same_user_this_month"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        votes = await self.vote_log.votes_on_author(voter.uid, post.uid)
        return len(self._since(votes, MONTH)) < self.config.max_votes_to_same_user_per_month


class HasVotedTooManyTimesToday(VotingPermission):
    """Passes while the voter's votes in the last day are under the limit."""

    name = "has_voted_too_many_times_today"
    reason = "too_many_votes_today"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        votes = await self.vote_log.votes_by_voter(voter.uid)
        return len(self._since(votes, DAY)) < self.config.max_votes_per_user_per_day


class PostIsNotTooOld(VotingPermission):
    name = "post_is_not_too_old"
    reason = "post_too_old"

    async def check(self, voter: Voter, post: PostRef) -> bool:
        if not self.config.max_post_age_days:
            return True
        return self._age(post.timestamp) <= timedelta(days=self.config.max_post_age_days)
