"""Vote log persistence and secondary index maintenance.

Every vote is stored as one hash at its composite key and that key is added
to four index families:

- per thread: the posts a voter voted on in a thread
- per author: the votes a voter cast on an author's posts
- per voter: every vote cast by a voter
- per voter and type: the voter's upvotes or downvotes

Writes and undos touch these keys one store call at a time, in a fixed order,
and stop at the first failing call. There is no cross-key transaction, so a
``StorageError`` can leave the record and its indexes partially updated.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pydantic import ValidationError

from reputation_rules.core.errors import StorageError
from reputation_rules.core.keys import LogKeyFormat
from reputation_rules.db.store import KeyValueStore
from reputation_rules.schemas.vote import Vote, VoteLogRecord, VoteType

from .key_lock import KeyedLock

# Configure logger for this module
logger = logging.getLogger(__name__)


class VoteLogStore:
    """Write, undo and look up vote records and their indexes."""

    def __init__(
        self,
        store: KeyValueStore,
        keys: LogKeyFormat,
        *,
        serialize_writes: bool = True,
    ) -> None:
        """Initialize the vote log.

        Args:
            store: Key-value store holding records and index sets.
            keys: Key layout for records and indexes.
            serialize_writes: Serialize write/undo calls on the same record key
                within this process. Disabling it restores fully interleaved
                behaviour for concurrent calls on one key.
        """
        self._store = store
        self._keys = keys
        self._locks = KeyedLock() if serialize_writes else None

    def record_key(self, vote: Vote) -> str:
        """Return the composite key the vote is stored under."""
        return self._keys.get_main_log_id(
            vote.voter_id, vote.author_id, vote.topic_id, vote.post_id
        )

    @asynccontextmanager
    async def _serialized(self, key: str) -> AsyncIterator[None]:
        if self._locks is None:
            yield
            return
        async with self._locks.hold(key):
            yield

    async def write(self, vote: Vote) -> VoteLogRecord:
        """Persist a vote and add its key to every index family.

        A vote already stored under the same key is overwritten. If the
        overwritten record was a live vote of the other type, its key is
        removed from that type's index so no stale reference remains.

        Returns:
            The stored record, with ``undone`` set to False.

        Raises:
            StorageError: A store call failed; later steps were not attempted.
        """
        record = vote.model_copy(update={"undone": False})
        key = self.record_key(record)
        logger.info(
            "Logging vote type=%s voter=%s author=%s extra amount=%s",
            record.type.value,
            record.voter_id,
            record.author_id,
            record.amount,
        )

        async with self._serialized(key):
            previous = await self._load(key)

            await self._store.set_object(key, record.to_store_mapping())
            await self._store.set_add(
                self._keys.get_per_thread_log_id(record.voter_id, record.topic_id), key
            )
            await self._store.set_add(
                self._keys.get_per_author_log_id(record.voter_id, record.author_id), key
            )
            await self._store.set_add(self._keys.get_per_user_log_id(record.voter_id), key)
            if previous is not None and not previous.undone and previous.type != record.type:
                await self._store.set_remove(
                    self._keys.get_per_user_and_type_log_id(record.voter_id, previous.type), key
                )
            await self._store.set_add(
                self._keys.get_per_user_and_type_log_id(record.voter_id, record.type), key
            )
        return record

    async def undo(self, vote: Vote) -> VoteLogRecord | None:
        """Mark a vote as undone and remove its key from every index family.

        The record itself is kept for auditing; only its ``undone`` field is
        updated. The key is removed from both the upvote and the downvote
        index of the voter regardless of the vote's type. When no record is
        stored at the key, nothing is created and only the index removals run.

        Returns:
            The vote with ``undone`` set to True, or None if it was never recorded.

        Raises:
            StorageError: A store call failed; later steps were not attempted.
        """
        record = vote.model_copy(update={"undone": True})
        key = self.record_key(record)
        logger.info(
            "Undoing vote type=%s voter=%s author=%s extra amount=%s",
            record.type.value,
            record.voter_id,
            record.author_id,
            record.amount,
        )

        async with self._serialized(key):
            stored = await self._load(key)
            if stored is None:
                logger.warning("No vote recorded at %s, clearing index entries only", key)
            else:
                await self._store.set_object_field(key, "undone", True)
            await self._store.set_remove(
                self._keys.get_per_thread_log_id(record.voter_id, record.topic_id), key
            )
            await self._store.set_remove(
                self._keys.get_per_author_log_id(record.voter_id, record.author_id), key
            )
            await self._store.set_remove(self._keys.get_per_user_log_id(record.voter_id), key)
            for vote_type in VoteType:
                await self._store.set_remove(
                    self._keys.get_per_user_and_type_log_id(record.voter_id, vote_type), key
                )
        if stored is None:
            return None
        return record

    async def lookup(
        self, voter_id: int, author_id: int, topic_id: int, post_id: int
    ) -> VoteLogRecord | None:
        """Return the record stored for the tuple, or None if there is none."""
        key = self._keys.get_main_log_id(voter_id, author_id, topic_id, post_id)
        return await self._load(key)

    async def count_thread_votes(self, voter_id: int, topic_id: int) -> int:
        """Return how many posts of a thread the voter currently has live votes on."""
        return len(await self._load_index(self._keys.get_per_thread_log_id(voter_id, topic_id)))

    async def votes_on_author(self, voter_id: int, author_id: int) -> list[VoteLogRecord]:
        """Return the voter's live votes on the author's posts."""
        return await self._load_index(self._keys.get_per_author_log_id(voter_id, author_id))

    async def votes_by_voter(
        self, voter_id: int, vote_type: VoteType | None = None
    ) -> list[VoteLogRecord]:
        """Return the voter's live votes, optionally only those of one type."""
        if vote_type is None:
            index_key = self._keys.get_per_user_log_id(voter_id)
        else:
            index_key = self._keys.get_per_user_and_type_log_id(voter_id, vote_type)
        records = await self._load_index(index_key)
        if vote_type is not None:
            records = [record for record in records if record.type == vote_type]
        return records

    async def _load_index(self, index_key: str) -> list[VoteLogRecord]:
        records = []
        for key in sorted(await self._store.get_set_members(index_key)):
            record = await self._load(key)
            # Skip members left behind by an interrupted write or undo
            if record is None or record.undone:
                continue
            records.append(record)
        return records

    async def _load(self, key: str) -> VoteLogRecord | None:
        data = await self._store.get_object(key)
        if data is None:
            return None
        try:
            return VoteLogRecord.model_validate(data)
        except ValidationError as exc:
            raise StorageError("get_object", key, f"Malformed vote record at {key!r}") from exc

