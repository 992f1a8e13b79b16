"""Redis cache backend for Tiger-Tail.

Provides async Redis operations for caching payload bytes.
Uses redis-py async client for connection pooling.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from tigertail.cache.backend import CacheBackend, CacheBackendError
from tigertail.config import redact_url, settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Module-level connection pool
_redis_client: Redis | None = None


async def get_redis() -> Redis:
    """Get or create the Redis client.

    Uses connection pooling for efficient connection management.
    """
    global _redis_client
    if _redis_client is None:
        logger.info("Connecting to Redis at %s", redact_url(settings.redis_url))
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            decode_responses=False,  # We're storing bytes
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _redis_client
    if _redis_client is not None:
        logger.info("Closing Redis connection")
        await _redis_client.aclose()
        _redis_client = None


class RedisCacheBackend(CacheBackend):
    """Cache backend over a redis.asyncio client.

    redis-py returns None for a missing key, which maps directly onto the
    backend's miss signal. Every RedisError is re-raised as CacheBackendError.
    """

    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> bytes | None:
        try:
            return cast(bytes | None, await self.client.get(key))
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"error getting key {key} from Redis: {e}") from e

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        try:
            if ttl > 0:
                await self.client.setex(key, ttl, value)
            else:
                await self.client.set(key, value)
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"error setting key {key} in Redis: {e}") from e

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self.client.delete(*keys)
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"error deleting keys {list(keys)} from Redis: {e}") from e

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.client.exists(key))
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"error checking key {key} in Redis: {e}") from e

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except (RedisError, OSError):
            return False

    async def flush_all(self) -> None:
        try:
            await self.client.flushdb()
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"error flushing Redis database: {e}") from e

    async def close(self) -> None:
        global _redis_client
        logger.info("Closing Redis connection")
        await self.client.aclose()
        if self.client is _redis_client:
            _redis_client = None
