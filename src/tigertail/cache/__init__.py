"""Cache layer for Tiger-Tail.

Provides lookaside caching with the cache-aside pattern:
- The application populates the cache after a store read or a write
- Every entry carries the same fixed TTL
- Every cache failure falls back to the primary store
"""

from tigertail.cache.backend import CacheBackend, CacheBackendError
from tigertail.cache.coordinator import (
    DEFAULT_TTL,
    ListingLookup,
    PostCacheCoordinator,
    PostLookup,
)
from tigertail.cache.factory import close_cache_backend, get_cache_backend
from tigertail.cache.keys import CacheKeys
from tigertail.cache.memory import MemoryCacheBackend
from tigertail.cache.redis import RedisCacheBackend
from tigertail.cache.serializer import CacheDecodeError

__all__ = [
    # Backends
    "CacheBackend",
    "CacheBackendError",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "get_cache_backend",
    "close_cache_backend",
    # Coordination
    "CacheKeys",
    "CacheDecodeError",
    "DEFAULT_TTL",
    "PostCacheCoordinator",
    "ListingLookup",
    "PostLookup",
]
