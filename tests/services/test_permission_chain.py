# tests/services/test_permission_chain.py
"""Tests for the ordered upvote and downvote permission chains."""

from __future__ import annotations

import copy
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from reputation_rules.core.errors import EvaluationError, StorageError
from reputation_rules.schemas import PermissionDecision, VoteType, Voter
from reputation_rules.services.permission_chain import PermissionChainEvaluator


def _names(chain) -> list[str]:
    return [permission.name for permission in chain]


def test_upvote_chain_order(evaluator) -> None:
    assert _names(evaluator.upvote_chain) == [
        "voting_allowed_in_category",
        "has_enough_posts_to_upvote",
        "is_old_enough_to_upvote",
        "has_voted_too_many_posts_in_thread",
        "has_voted_author_too_many_times_this_month",
        "has_voted_too_many_times_today",
        "post_is_not_too_old",
    ]


def test_downvote_chain_order(evaluator) -> None:
    assert _names(evaluator.downvote_chain) == [
        "voting_allowed_in_category",
        "has_downvoted_too_many_times_today",
        "has_enough_posts_to_downvote",
        "is_old_enough_to_downvote",
        "has_enough_reputation_to_downvote",
        "has_voted_too_many_posts_in_thread",
        "has_voted_author_too_many_times_this_month",
        "has_voted_too_many_times_today",
        "post_is_not_too_old",
    ]


def test_chains_share_check_instances(evaluator) -> None:
    assert evaluator.upvote_chain[0] is evaluator.downvote_chain[0]
    assert evaluator.upvote_chain[3:] == evaluator.downvote_chain[5:]
    assert evaluator.chain_for(VoteType.UPVOTE) is evaluator.upvote_chain
    assert evaluator.chain_for(VoteType.DOWNVOTE) is evaluator.downvote_chain


@pytest.mark.asyncio
@pytest.mark.parametrize("vote_type", list(VoteType))
async def test_eligible_voter_is_allowed(evaluator, voter, post, vote_type) -> None:
    decision = await evaluator.evaluate(voter, post, vote_type)

    assert decision == PermissionDecision.allow()
    assert decision.reason is None


@pytest.mark.asyncio
async def test_first_failing_check_wins(evaluator, post, now) -> None:
    """A brand new account fails both the post count and age checks; post count runs first."""
    newcomer = Voter(uid=1, reputation=0, postcount=0, joindate=now)

    decision = await evaluator.evaluate(newcomer, post, VoteType.UPVOTE)

    assert decision == PermissionDecision.deny("not_enough_posts_to_upvote")


@pytest.mark.asyncio
async def test_later_checks_are_not_run_after_denial(evaluator, post, now) -> None:
    newcomer = Voter(uid=1, postcount=0, joindate=now)
    later_checks = evaluator.upvote_chain[2:]
    mocks = [AsyncMock(return_value=True) for _ in later_checks]

    with (
        patch.object(later_checks[0], "check", mocks[0]),
        patch.object(later_checks[1], "check", mocks[1]),
        patch.object(later_checks[2], "check", mocks[2]),
        patch.object(later_checks[3], "check", mocks[3]),
        patch.object(later_checks[4], "check", mocks[4]),
    ):
        decision = await evaluator.evaluate(newcomer, post, VoteType.UPVOTE)

    assert decision.reason == "not_enough_posts_to_upvote"
    for mock in mocks:
        mock.assert_not_awaited()


@pytest.mark.asyncio
async def test_category_policy_runs_first(
    settings_factory, vote_log, clock, post, now
) -> None:
    config = settings_factory(disabled_categories=[post.cid])
    evaluator = PermissionChainEvaluator(config, vote_log, clock=clock)
    newcomer = Voter(uid=1, postcount=0, joindate=now)

    for vote_type in VoteType:
        decision = await evaluator.evaluate(newcomer, post, vote_type)
        assert decision.reason == "voting_disabled_in_category"


@pytest.mark.asyncio
async def test_downvote_specific_checks_precede_shared_checks(
    evaluator, vote_log, make_vote, post, now
) -> None:
    """A voter over the thread limit with too few posts is denied for the post count first."""
    for pid in range(3):
        await vote_log.write(make_vote(topic_id=post.tid, post_id=pid))
    voter = Voter(uid=1, reputation=500, postcount=20, joindate=now - timedelta(days=400))

    downvote = await evaluator.evaluate(voter, post, VoteType.DOWNVOTE)
    upvote = await evaluator.evaluate(voter, post, VoteType.UPVOTE)

    assert downvote.reason == "not_enough_posts_to_downvote"
    assert upvote.reason == "too_many_votes_in_thread"


@pytest.mark.asyncio
async def test_daily_downvote_limit_checked_before_eligibility(
    evaluator, vote_log, make_vote, post, now
) -> None:
    for _ in range(3):
        await vote_log.write(make_vote(type=VoteType.DOWNVOTE))
    newcomer = Voter(uid=1, postcount=0, joindate=now)

    decision = await evaluator.evaluate(newcomer, post, VoteType.DOWNVOTE)

    assert decision.reason == "too_many_downvotes_today"


@pytest.mark.asyncio
async def test_storage_failure_is_not_a_denial(evaluator, vote_log, voter, post) -> None:
    failure = StorageError("set_count", "test:voter:1:topic:7")

    with patch.object(vote_log, "count_thread_votes", AsyncMock(side_effect=failure)):
        with pytest.raises(EvaluationError) as excinfo:
            await evaluator.evaluate(voter, post, VoteType.UPVOTE)

    assert excinfo.value.predicate == "has_voted_too_many_posts_in_thread"
    assert excinfo.value.__cause__ is failure


@pytest.mark.asyncio
async def test_failure_aborts_remaining_checks(evaluator, voter, post) -> None:
    category, *rest = evaluator.downvote_chain
    mocks = [AsyncMock(return_value=True) for _ in rest]

    with patch.object(category, "check", AsyncMock(side_effect=StorageError("get", "k"))):
        with (
            patch.object(rest[0], "check", mocks[0]),
            patch.object(rest[1], "check", mocks[1]),
        ):
            with pytest.raises(EvaluationError):
                await evaluator.evaluate(voter, post, VoteType.DOWNVOTE)

    mocks[0].assert_not_awaited()
    mocks[1].assert_not_awaited()


@pytest.mark.asyncio
async def test_evaluation_does_not_modify_the_vote_log(
    evaluator, store, vote_log, make_vote, voter, post
) -> None:
    await vote_log.write(make_vote(topic_id=post.tid))
    objects_before = copy.deepcopy(store._objects)
    sets_before = copy.deepcopy(dict(store._sets))

    for vote_type in VoteType:
        await evaluator.evaluate(voter, post, vote_type)

    assert store._objects == objects_before
    assert dict(store._sets) == sets_before
