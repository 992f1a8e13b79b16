"""Cache-aside coordination for posts and listings.

PostCacheCoordinator is the single point of contact for cache reads and
writes. It owns the key namespace, the TTL and the payload encoding, so the
request handlers only ever see hits and misses:

- Reads fold every failure into a miss. A backend miss, an unreachable
  backend and an undecodable payload all produce hit=False.
- Writes are full overwrites with the same fixed TTL. They raise
  CacheBackendError so the caller can log it; no caller fails a request on it.
- Nothing is merged or patched. Two concurrent writers leave whichever
  finished last.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from tigertail.cache.backend import CacheBackend, CacheBackendError
from tigertail.cache.keys import CacheKeys
from tigertail.cache.serializer import (
    CacheDecodeError,
    decode_listing,
    decode_post,
    encode_listing,
    encode_post,
)
from tigertail.core.model import Post, PostWithUser

logger = logging.getLogger(__name__)

# Every entry expires after five minutes, with or without writes
DEFAULT_TTL = 300


@dataclass(frozen=True)
class ListingLookup:
    """Outcome of a listing read."""

    posts: list[PostWithUser] = field(default_factory=list)
    total: int = 0
    hit: bool = False


@dataclass(frozen=True)
class PostLookup:
    """Outcome of a single post read."""

    post: Post | None = None
    hit: bool = False


class PostCacheCoordinator:
    """Cache operations for posts and the feed listing."""

    def __init__(self, backend: CacheBackend, ttl: int = DEFAULT_TTL):
        self.backend = backend
        self.ttl = ttl

    async def _read(self, key: str) -> bytes | None:
        """Fetch raw bytes, treating an unreachable backend as a miss."""
        try:
            return await self.backend.get(key)
        except CacheBackendError as e:
            logger.warning("Cache read failed for %s, falling back to store: %s", key, e)
            return None

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    async def get_listing(self) -> ListingLookup:
        """Read the cached feed listing."""
        data = await self._read(CacheKeys.LISTING)
        if data is None:
            return ListingLookup()
        try:
            posts, total = decode_listing(data)
        except CacheDecodeError as e:
            logger.warning("Discarding undecodable cached listing: %s", e)
            return ListingLookup()
        return ListingLookup(posts=posts, total=total, hit=True)

    async def set_listing(self, posts: Sequence[PostWithUser], total: int) -> None:
        """Overwrite the cached feed listing."""
        await self.backend.set(CacheKeys.LISTING, encode_listing(posts, total), self.ttl)

    async def invalidate_posts(self) -> None:
        """Delete the feed listing and the legacy posts key. Idempotent."""
        await self.backend.delete(*CacheKeys.listings())

    # -------------------------------------------------------------------------
    # Single post
    # -------------------------------------------------------------------------

    async def get_post(self, post_id: str) -> PostLookup:
        """Read a cached post."""
        key = CacheKeys.post(post_id)
        data = await self._read(key)
        if data is None:
            return PostLookup()
        try:
            post = decode_post(data)
        except CacheDecodeError as e:
            logger.warning("Discarding undecodable cached post %s: %s", post_id, e)
            return PostLookup()
        return PostLookup(post=post, hit=True)

    async def set_post(self, post: Post) -> None:
        """Overwrite a cached post."""
        await self.backend.set(CacheKeys.post(post.id), encode_post(post), self.ttl)

    async def invalidate_post(self, post_id: str) -> None:
        """Delete a cached post."""
        await self.backend.delete(CacheKeys.post(post_id))

    async def ping(self) -> bool:
        """Check cache connectivity."""
        try:
            return await self.backend.ping()
        except CacheBackendError:
            return False
