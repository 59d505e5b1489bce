# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any

import pytest

from reputation_rules.core.keys import LogKeyFormat
from reputation_rules.core.settings import Settings
from reputation_rules.db.store import MemoryStore
from reputation_rules.schemas import PostRef, Vote, VoteType, Voter
from reputation_rules.services.permission_chain import PermissionChainEvaluator
from reputation_rules.services.reputation import ReputationManager
from reputation_rules.services.vote_log import VoteLogStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

_POST_ID_COUNTER = count(100)
_TOPIC_ID_COUNTER = count(10)


def fixed_clock() -> datetime:
    return NOW


def build_settings(**overrides: Any) -> Settings:
    """Return settings with predictable policy values for tests."""
    values: dict[str, Any] = {
        "store_backend": "memory",
        "key_prefix": "test",
        "upvote_extra_percentage": 5,
        "max_upvote_weigh": 30,
        "downvote_extra_percentage": 2,
        "max_downvote_weigh": 10,
        "disabled_categories": [],
        "min_posts_to_upvote": 10,
        "min_days_to_upvote": 7,
        "min_posts_to_downvote": 50,
        "min_days_to_downvote": 15,
        "min_reputation_to_downvote": 10,
        "max_downvotes_per_day": 3,
        "max_votes_per_user_in_thread": 3,
        "max_votes_to_same_user_per_month": 4,
        "max_votes_per_user_per_day": 5,
        "max_post_age_days": 0,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def now() -> datetime:
    """The instant the fixed test clock reports."""
    return NOW


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    return fixed_clock


@pytest.fixture()
def settings_factory() -> Callable[..., Settings]:
    return build_settings


@pytest.fixture()
def test_settings() -> Settings:
    return build_settings()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def keys() -> LogKeyFormat:
    return LogKeyFormat("test")


@pytest.fixture()
def vote_log(store: MemoryStore, keys: LogKeyFormat) -> VoteLogStore:
    return VoteLogStore(store, keys)


@pytest.fixture()
def evaluator(test_settings: Settings, vote_log: VoteLogStore) -> PermissionChainEvaluator:
    return PermissionChainEvaluator(test_settings, vote_log, clock=fixed_clock)


@pytest.fixture()
def manager(
    test_settings: Settings,
    vote_log: VoteLogStore,
    evaluator: PermissionChainEvaluator,
) -> ReputationManager:
    return ReputationManager(test_settings, vote_log, evaluator)


@pytest.fixture()
def voter() -> Voter:
    """A voter who passes every upvote and downvote threshold."""
    return Voter(uid=1, reputation=500, postcount=200, joindate=NOW - timedelta(days=365))


@pytest.fixture()
def post() -> PostRef:
    return PostRef(pid=42, tid=7, uid=2, cid=3, timestamp=NOW - timedelta(hours=1))


@pytest.fixture()
def make_vote() -> Callable[..., Vote]:
    """Return a factory building votes with sensible defaults."""

    def _make_vote(**overrides: Any) -> Vote:
        values: dict[str, Any] = {
            "type": VoteType.UPVOTE,
            "voter_id": 1,
            "author_id": 2,
            "topic_id": next(_TOPIC_ID_COUNTER),
            "post_id": next(_POST_ID_COUNTER),
            "amount": 0,
            "timestamp": NOW - timedelta(minutes=5),
        }
        values.update(overrides)
        return Vote(**values)

    return _make_vote
