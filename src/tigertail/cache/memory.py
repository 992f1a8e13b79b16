"""In-process cache backend with per-key TTL.

Suitable for single-process deployments and tests. Expired entries are
dropped lazily on access. There is no capacity bound and no LRU; the clock
is injectable so expiry can be exercised without sleeping.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from tigertail.cache.backend import CacheBackend

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheBackend):
    """Dictionary-backed cache storing bytes with expiry timestamps."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        # key -> (value, expires_at); expires_at None means no expiry
        self._items: dict[str, tuple[bytes, float | None]] = {}
        self._lock = asyncio.Lock()

    def _is_expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and expires_at <= self._clock()

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._is_expired(expires_at):
                del self._items[key]
                return None
            return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        expires_at = self._clock() + ttl if ttl > 0 else None
        async with self._lock:
            self._items[key] = (value, expires_at)

    async def delete(self, *keys: str) -> None:
        async with self._lock:
            for key in keys:
                self._items.pop(key, None)

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def ping(self) -> bool:
        return True

    async def flush_all(self) -> None:
        async with self._lock:
            self._items.clear()

    async def close(self) -> None:
        logger.debug("Closing memory cache (%d entries dropped)", len(self._items))
        self._items.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        expired = [k for k, (_, exp) in self._items.items() if self._is_expired(exp)]
        for key in expired:
            del self._items[key]
        return len(expired)
