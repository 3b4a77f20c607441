"""In-process cache adapter with per-entry TTL and an LRU size bound."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

import structlog

log = structlog.get_logger(__name__)


class _CacheEntry:
    """Time-bounded cache entry."""

    __slots__ = ("value", "expires_at")

    def __init__(self, value: Any, expires_at: float) -> None:
        self.value = value
        self.expires_at = expires_at


class MemoryCacheAdapter:
    """Async-facing dict cache for a single process.

    - Expiry is checked on read (no background sweeper).
    - When ``max_entries`` is exceeded the least recently used entry is
      evicted.
    - All operations are synchronous under the hood, so they are atomic
      with respect to the event loop.

    Args:
        ttl_seconds: Default TTL for ``set()`` without explicit value.
        max_entries: Capacity bound (LRU eviction beyond it).
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.default_ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()

        log.info(
            "memory_cache_init",
            default_ttl=ttl_seconds,
            max_entries=max_entries,
        )

    # --- Context Manager ---
    async def __aenter__(self) -> MemoryCacheAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        size = len(self._entries)
        self._entries.clear()
        log.info("memory_cache_closed", dropped=size)

    def __len__(self) -> int:
        return len(self._entries)

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        log.debug("cache_get", key=key, hit=entry is not None)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expire_time = ttl if ttl is not None else self.default_ttl
        self._entries[key] = _CacheEntry(value, self._clock() + expire_time)
        self._entries.move_to_end(key)
        self._enforce_max_size()
        log.debug("cache_set", key=key, ttl=expire_time)

    async def delete(self, key: str) -> bool:
        deleted = self._entries.pop(key, None) is not None
        log.debug("cache_delete", key=key, deleted=deleted)
        return deleted

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def clear(self) -> None:
        self._entries.clear()
        log.warning("cache_cleared")

    def _live_entry(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            log.debug("cache_expired", key=key)
            return None
        return entry

    def _enforce_max_size(self) -> None:
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            log.debug("cache_evicted", key=evicted)
