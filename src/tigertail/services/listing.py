"""Read path for the feed and single-post endpoints.

Every read tries the cache first and falls back to the primary store on any
kind of miss. Responses carry a provenance tag:

- source="cache": the cache lookup reported a hit
- source="database": anything else

After a store fallback the fetched data is written back to the cache in the
background; the response never waits for it. The listing key is not
parameterized by page, so a cache hit returns whichever page was populated
last, regardless of the page and limit requested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from tigertail.cache.coordinator import PostCacheCoordinator
from tigertail.core.errors import RecordNotFound
from tigertail.core.model import UNKNOWN_USERNAME, Post, PostWithUser
from tigertail.core.ports import IdentityProvider, PostStore
from tigertail.jobs.runner import BackgroundRunner

logger = logging.getLogger(__name__)

Source = Literal["cache", "database"]
SOURCE_CACHE: Source = "cache"
SOURCE_DATABASE: Source = "database"


@dataclass(frozen=True)
class ListingPage:
    """A feed response before serialization."""

    posts: list[PostWithUser]
    page: int
    limit: int
    total: int
    source: Source


@dataclass(frozen=True)
class PostDetail:
    """A single-post response before serialization.

    Cached posts carry no username; store reads always do.
    """

    post: Post
    source: Source


class ListingRequestHandler:
    """Cache-aside orchestration for reads."""

    def __init__(
        self,
        cache: PostCacheCoordinator,
        store: PostStore,
        identity: IdentityProvider,
        runner: BackgroundRunner,
    ):
        self.cache = cache
        self.store = store
        self.identity = identity
        self.runner = runner

    async def list_posts(self, page: int, limit: int) -> ListingPage:
        """Answer a feed read.

        Args:
            page: 1-based page number, already validated
            limit: Page size, already validated and clamped

        Raises:
            StoreError: If the cache missed and the store failed
        """
        cached = await self.cache.get_listing()
        if cached.hit:
            logger.debug("Listing served from cache (%d posts)", len(cached.posts))
            return ListingPage(
                posts=cached.posts,
                page=page,
                limit=limit,
                total=cached.total,
                source=SOURCE_CACHE,
            )

        posts = await self.store.list((page - 1) * limit, limit)
        total = await self.store.count()

        self.runner.submit(self.cache.set_listing(posts, total), name="set_listing")
        return ListingPage(
            posts=posts,
            page=page,
            limit=limit,
            total=total,
            source=SOURCE_DATABASE,
        )

    async def get_post(self, post_id: str) -> PostDetail:
        """Answer a single-post read.

        Raises:
            RecordNotFound: If the post does not exist
            StoreError: If the cache missed and the store failed
        """
        cached = await self.cache.get_post(post_id)
        if cached.hit and cached.post is not None:
            return PostDetail(post=cached.post, source=SOURCE_CACHE)

        post = await self.store.get_by_id(post_id)
        try:
            username = await self.identity.get_username(post.user_id)
        except RecordNotFound:
            username = UNKNOWN_USERNAME

        self.runner.submit(self.cache.set_post(post), name=f"set_post:{post_id}")
        return PostDetail(
            post=PostWithUser(**post.model_dump(), username=username),
            source=SOURCE_DATABASE,
        )
