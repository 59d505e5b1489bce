"""Store construction from settings."""

from __future__ import annotations

from reputation_rules.core.settings import Settings, settings

from .store import KeyValueStore, MemoryStore, RedisStore


def create_store(config: Settings | None = None) -> KeyValueStore:
    """Return a store for the configured backend."""
    config = config or settings
    if config.store_backend == "memory":
        return MemoryStore()
    return RedisStore.from_url(config.redis_url)
