"""Maps the configured ``cache.backend`` name to an adapter instance."""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal

import structlog

from vidget.domain.ports.cache import CachePort
from vidget.infrastructure.cache.memory_adapter import MemoryCacheAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["memory"]

_BACKENDS: dict[str, Callable[..., CachePort]] = {
    "memory": MemoryCacheAdapter,
}


def create_cache(
    backend: CacheBackend = "memory",
    *,
    ttl_seconds: int = 3600,
    max_entries: int = 10_000,
) -> CachePort:
    """Instantiate the adapter registered for ``backend``.

    Raises:
        ValueError: no adapter is registered under that name.
    """
    factory = _BACKENDS.get(backend)
    if factory is None:
        known = ", ".join(sorted(_BACKENDS))
        raise ValueError(f"Unknown cache backend {backend!r} (known: {known})")

    log.debug("cache_backend_selected", backend=backend, ttl=ttl_seconds)
    return factory(ttl_seconds=ttl_seconds, max_entries=max_entries)
