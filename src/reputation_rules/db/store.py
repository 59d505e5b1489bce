"""Key-value store backends for the vote log.

The vote log only needs hashes (one per vote record) and unordered sets (one
per index). Each call is an independent operation; nothing here offers
atomicity across keys.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from typing import Any, Protocol

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from reputation_rules.core.errors import StorageError


class KeyValueStore(Protocol):
    """Async primitives the vote log is built on."""

    async def get_object(self, key: str) -> dict[str, Any] | None: ...

    async def set_object(self, key: str, value: Mapping[str, Any]) -> None: ...

    async def set_object_field(self, key: str, field: str, value: Any) -> None: ...

    async def set_add(self, key: str, value: str) -> None: ...

    async def set_remove(self, key: str, value: str) -> None: ...

    async def get_set_members(self, key: str) -> set[str]: ...

    async def set_count(self, key: str) -> int: ...

    async def close(self) -> None: ...


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RedisStore:
    """Store backed by Redis hashes and sets.

    Values are written as strings; readers rebuild typed objects through
    model validation. Redis failures are re-raised as ``StorageError``.
    """

    def __init__(self, client: aioredis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        return cls(aioredis.from_url(url, decode_responses=True))

    async def get_object(self, key: str) -> dict[str, Any] | None:
        try:
            data = await self._redis.hgetall(key)
        except RedisError as exc:
            raise StorageError("get_object", key) from exc
        # HGETALL answers an empty mapping for missing keys
        return dict(data) if data else None

    async def set_object(self, key: str, value: Mapping[str, Any]) -> None:
        mapping = {field: _encode(item) for field, item in value.items() if item is not None}
        try:
            await self._redis.hset(key, mapping=mapping)
        except RedisError as exc:
            raise StorageError("set_object", key) from exc

    async def set_object_field(self, key: str, field: str, value: Any) -> None:
        try:
            await self._redis.hset(key, field, _encode(value))
        except RedisError as exc:
            raise StorageError("set_object_field", key) from exc

    async def set_add(self, key: str, value: str) -> None:
        try:
            await self._redis.sadd(key, value)
        except RedisError as exc:
            raise StorageError("set_add", key) from exc

    async def set_remove(self, key: str, value: str) -> None:
        try:
            await self._redis.srem(key, value)
        except RedisError as exc:
            raise StorageError("set_remove", key) from exc

    async def get_set_members(self, key: str) -> set[str]:
        try:
            members = await self._redis.smembers(key)
        except RedisError as exc:
            raise StorageError("get_set_members", key) from exc
        return set(members)

    async def set_count(self, key: str) -> int:
        try:
            return int(await self._redis.scard(key))
        except RedisError as exc:
            raise StorageError("set_count", key) from exc

    async def close(self) -> None:
        await self._redis.aclose()


class MemoryStore:
    """In-process store for tests and local runs.

    Mirrors Redis semantics: ``set_object`` merges fields into an existing
    hash and ``set_object_field`` creates the hash if it is missing.
    """

    def __init__(self) -> None:
        self._objects: dict[str, dict[str, Any]] = {}
        self._sets: dict[str, set[str]] = defaultdict(set)

    async def get_object(self, key: str) -> dict[str, Any] | None:
        obj = self._objects.get(key)
        return dict(obj) if obj is not None else None

    async def set_object(self, key: str, value: Mapping[str, Any]) -> None:
        self._objects.setdefault(key, {}).update(
            {field: item for field, item in value.items() if item is not None}
        )

    async def set_object_field(self, key: str, field: str, value: Any) -> None:
        self._objects.setdefault(key, {})[field] = value

    async def set_add(self, key: str, value: str) -> None:
        self._sets[key].add(value)

    async def set_remove(self, key: str, value: str) -> None:
        members = self._sets.get(key)
        if members is None:
            return
        members.discard(value)
        if not members:
            del self._sets[key]

    async def get_set_members(self, key: str) -> set[str]:
        return set(self._sets.get(key, ()))

    async def set_count(self, key: str) -> int:
        return len(self._sets.get(key, ()))

    async def close(self) -> None:
        return None
