"""Cache infrastructure."""

from .cache_factory import CacheBackend, create_cache
from .memory_adapter import MemoryCacheAdapter

__all__ = [
    "CacheBackend",
    "MemoryCacheAdapter",
    "create_cache",
]
