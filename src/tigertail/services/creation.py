"""Write path: create, update and delete posts.

Each write runs in the same order:

1. Auth gate, before anything else
2. Body validation, before any store access
3. The store write
4. Best-effort cache maintenance submitted to the background runner

Step 4 never delays or fails the response. After a create the first page of
the feed is re-read and written to the listing key; if the page cannot be
read the listing keys are invalidated instead, so stale data is removed
rather than kept. Updates and deletes invalidate the post key and both
listing keys.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from pydantic import BaseModel, ValidationError

from tigertail.cache.coordinator import PostCacheCoordinator
from tigertail.core.errors import AuthError, PostValidationError, RecordNotFound, StoreError
from tigertail.core.ids import generate_post_id
from tigertail.core.model import Post
from tigertail.core.ports import PostStore
from tigertail.jobs.runner import BackgroundRunner
from tigertail.security.auth import AuthGate, Credentials

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body"
CONTENT_REQUIRED_MESSAGE = "Content is required"


class PostContent(BaseModel):
    """Request body accepted by create and update."""

    model_config = {"extra": "ignore"}

    content: str


def parse_content(raw_body: bytes) -> str:
    """Extract non-empty content from a JSON request body.

    Raises:
        PostValidationError: If the body is not a JSON object with a string
            content field, or the content is empty
    """
    try:
        body = PostContent.model_validate_json(raw_body)
    except ValidationError as e:
        raise PostValidationError(INVALID_BODY_MESSAGE) from e
    if body.content == "":
        raise PostValidationError(CONTENT_REQUIRED_MESSAGE)
    return body.content


class _WriteCoordinator:
    """Collaborators shared by the write coordinators."""

    def __init__(
        self,
        cache: PostCacheCoordinator,
        store: PostStore,
        gate: AuthGate,
        runner: BackgroundRunner,
        author_id: str,
    ):
        self.cache = cache
        self.store = store
        self.gate = gate
        self.runner = runner
        self.author_id = author_id

    def _authenticate(self, credentials: Credentials | None) -> None:
        if not self.gate.check(credentials):
            raise AuthError("Unauthorized")


class CreationCoordinator(_WriteCoordinator):
    """Orchestrates post creation."""

    def __init__(
        self,
        cache: PostCacheCoordinator,
        store: PostStore,
        gate: AuthGate,
        runner: BackgroundRunner,
        author_id: str,
        refresh_limit: int = 10,
    ):
        super().__init__(cache, store, gate, runner, author_id)
        self.refresh_limit = refresh_limit

    async def create(self, credentials: Credentials | None, raw_body: bytes) -> Post:
        """Create a post and schedule a refresh of the feed listing.

        Args:
            credentials: Basic credentials presented with the request, if any
            raw_body: Undecoded request body

        Returns:
            The persisted post

        Raises:
            AuthError: If the credentials are missing or rejected
            PostValidationError: If the body is invalid or the content empty
            StoreError: If the post could not be persisted
        """
        self._authenticate(credentials)
        content = parse_content(raw_body)

        now = datetime.now(UTC)
        post = Post(
            id=generate_post_id(),
            user_id=self.author_id,
            content=content,
            created_at=now,
            updated_at=now,
        )
        await self.store.create(post)
        logger.info("Created post %s", post.id)

        await self._refresh_listing()
        return post

    async def _refresh_listing(self) -> None:
        try:
            posts = await self.store.list(0, self.refresh_limit)
        except StoreError as e:
            logger.warning("Could not re-read feed after create, invalidating: %s", e)
            self.runner.submit(self.cache.invalidate_posts(), name="invalidate_posts")
            return

        try:
            total = await self.store.count()
        except StoreError as e:
            logger.warning("Could not count posts after create: %s", e)
            total = len(posts)

        self.runner.submit(self.cache.set_listing(posts, total), name="set_listing")


class ModificationCoordinator(_WriteCoordinator):
    """Orchestrates updates and deletes of posts owned by the author."""

    async def _get_owned(self, post_id: str) -> Post:
        post = await self.store.get_by_id(post_id)
        if post.user_id != self.author_id:
            raise RecordNotFound("Post", post_id)
        return post

    def _invalidate(self, post_id: str) -> None:
        self.runner.submit(self.cache.invalidate_post(post_id), name=f"invalidate_post:{post_id}")
        self.runner.submit(self.cache.invalidate_posts(), name="invalidate_posts")

    async def update(self, credentials: Credentials | None, post_id: str, raw_body: bytes) -> Post:
        """Replace the content of a post.

        Raises:
            AuthError: If the credentials are missing or rejected
            PostValidationError: If the body is invalid or the content empty
            RecordNotFound: If the post does not exist or is not owned
            StoreError: If the store failed
        """
        self._authenticate(credentials)
        content = parse_content(raw_body)

        post = await self._get_owned(post_id)
        updated = post.model_copy(update={"content": content, "updated_at": datetime.now(UTC)})
        await self.store.update(updated)
        logger.info("Updated post %s", post_id)

        self._invalidate(post_id)
        return updated

    async def delete(self, credentials: Credentials | None, post_id: str) -> None:
        """Delete a post.

        Raises:
            AuthError: If the credentials are missing or rejected
            RecordNotFound: If the post does not exist or is not owned
            StoreError: If the store failed
        """
        self._authenticate(credentials)

        await self._get_owned(post_id)
        await self.store.delete(post_id)
        logger.info("Deleted post %s", post_id)

        self._invalidate(post_id)
