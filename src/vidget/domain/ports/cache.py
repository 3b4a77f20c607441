"""Port for the key-value store behind the resolution cache."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Async TTL key-value store.

    Expired entries behave exactly like missing ones. Adapters are used as
    async context managers by the composition root; leaving the context
    releases whatever the adapter holds.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Store ``value``; ``ttl`` in seconds, adapter default when None."""
        ...

    async def delete(self, key: str) -> bool:
        """Return whether ``key`` was present."""
        ...

    async def exists(self, key: str) -> bool: ...

    async def clear(self) -> None: ...

    async def aclose(self) -> None: ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...
