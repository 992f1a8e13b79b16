"""Cache backend selection.

Select the backend with CACHE_BACKEND=memory|redis. The memory backend is the
default so the service runs without any external cache.
"""

from __future__ import annotations

import logging

from tigertail.cache.backend import CacheBackend
from tigertail.cache.memory import MemoryCacheBackend
from tigertail.cache.redis import RedisCacheBackend, get_redis
from tigertail.config import settings

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("memory", "redis")

# Module-level backend (initialized lazily)
_backend: CacheBackend | None = None


async def create_cache_backend(kind: str) -> CacheBackend:
    """Create a cache backend of the given kind."""
    if kind == "memory":
        return MemoryCacheBackend()
    if kind == "redis":
        return RedisCacheBackend(await get_redis())
    raise ValueError(f"Unknown cache backend {kind!r}; expected one of {SUPPORTED_BACKENDS}")


async def get_cache_backend() -> CacheBackend:
    """Get or create the configured cache backend."""
    global _backend
    if _backend is None:
        _backend = await create_cache_backend(settings.cache_backend)
        logger.info("Cache backend initialized: %s", settings.cache_backend)
    return _backend


async def close_cache_backend() -> None:
    """Close the configured cache backend."""
    global _backend
    if _backend is not None:
        await _backend.close()
        _backend = None
