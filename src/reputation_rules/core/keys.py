"""Deterministic key layout for vote log records and their indexes."""

from __future__ import annotations

from reputation_rules.schemas.vote import VoteType


class LogKeyFormat:
    """Build store keys for the vote log.

    Every family uses its own literal segment so keys from different families
    never collide, and ids are rendered as integers so distinct tuples never
    produce the same key within a family::

        {prefix}:vote:{voter}:{author}:{topic}:{post}
        {prefix}:voter:{voter}:topic:{topic}
        {prefix}:voter:{voter}:author:{author}
        {prefix}:voter:{voter}:votes
        {prefix}:voter:{voter}:type:{upvote|downvote}
    """

    def __init__(self, prefix: str = "reputation") -> None:
        if not prefix or ":" in prefix:
            raise ValueError(f"Invalid key prefix: {prefix!r}")
        self.prefix = prefix

    def get_main_log_id(self, voter_id: int, author_id: int, topic_id: int, post_id: int) -> str:
        return f"{self.prefix}:vote:{int(voter_id)}:{int(author_id)}:{int(topic_id)}:{int(post_id)}"

    def get_per_thread_log_id(self, voter_id: int, topic_id: int) -> str:
        return f"{self.prefix}:voter:{int(voter_id)}:topic:{int(topic_id)}"

    def get_per_author_log_id(self, voter_id: int, author_id: int) -> str:
        return f"{self.prefix}:voter:{int(voter_id)}:author:{int(author_id)}"

    def get_per_user_log_id(self, voter_id: int) -> str:
        return f"{self.prefix}:voter:{int(voter_id)}:votes"

    def get_per_user_and_type_log_id(self, voter_id: int, vote_type: VoteType | str) -> str:
        return f"{self.prefix}:voter:{int(voter_id)}:type:{VoteType(vote_type).value}"
