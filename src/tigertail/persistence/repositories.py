"""Repository pattern for microblog persistence.

PostRepository implements the PostStore contract and UserRepository the
IdentityProvider contract. Every SQLAlchemy failure is re-raised as
StoreError; unknown identifiers raise RecordNotFound.

Writes commit immediately: the write path has nothing else to do in the
same transaction, and the cache refresh that follows must see the row.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tigertail.core.errors import RecordNotFound, StoreError
from tigertail.core.model import UNKNOWN_USERNAME, Post, PostWithUser, User
from tigertail.core.ports import IdentityProvider, PostStore
from tigertail.persistence.tables import PostTable, UserTable

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; timestamps are stored in UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _to_post(row: PostTable) -> Post:
    return Post(
        id=row.id,
        user_id=row.user_id,
        content=row.content,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class BaseRepository:
    """Base repository holding the session and error translation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("Store failure while %s: %s", action, e)
            raise StoreError(f"error {action}: {e}") from e

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Store failure while %s: %s", action, e)
            raise StoreError(f"error {action}: {e}") from e


class PostRepository(BaseRepository, PostStore):
    """Repository for post operations."""

    async def _get_row(self, post_id: str) -> PostTable:
        with self._translate_errors("getting post"):
            row = await self.session.get(PostTable, post_id)
        if row is None:
            raise RecordNotFound("Post", post_id)
        return row

    async def get_by_id(self, post_id: str) -> Post:
        return _to_post(await self._get_row(post_id))

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    async def create(self, post: Post) -> None:
        self.session.add(
            PostTable(
                id=post.id,
                user_id=post.user_id,
                content=post.content,
                created_at=post.created_at,
                updated_at=post.updated_at,
            )
        )
        await self._commit("creating post")

    async def update(self, post: Post) -> None:
        row = await self._get_row(post.id)
        row.content = post.content
        row.updated_at = post.updated_at
        await self._commit("updating post")

    async def delete(self, post_id: str) -> None:
        with self._translate_errors("deleting post"):
            result = await self.session.execute(delete(PostTable).where(PostTable.id == post_id))
        if result.rowcount == 0:
            await self.session.rollback()
            raise RecordNotFound("Post", post_id)
        await self._commit("deleting post")

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    async def list(self, offset: int, limit: int) -> list[PostWithUser]:
        """Newest-first page joined with author names.

        Posts whose author row is missing are still listed, with the
        username reported as "unknown".
        """
        stmt = (
            select(PostTable, func.coalesce(UserTable.username, UNKNOWN_USERNAME))
            .outerjoin(UserTable, PostTable.user_id == UserTable.id)
            .order_by(PostTable.created_at.desc(), PostTable.id.desc())
            .offset(offset)
            .limit(limit)
        )
        with self._translate_errors("listing posts with users"):
            result = await self.session.execute(stmt)
            rows = result.all()
        return [
            PostWithUser(**_to_post(post).model_dump(), username=username)
            for post, username in rows
        ]

    async def count(self) -> int:
        with self._translate_errors("counting posts"):
            result = await self.session.execute(select(func.count()).select_from(PostTable))
            return int(result.scalar_one())


class UserRepository(BaseRepository, IdentityProvider):
    """Repository for author lookups."""

    async def get_by_id(self, user_id: str) -> User:
        with self._translate_errors("getting user"):
            row = await self.session.get(UserTable, user_id)
        if row is None:
            raise RecordNotFound("User", user_id)
        return User(
            id=row.id,
            username=row.username,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )

    async def get_username(self, user_id: str) -> str:
        return (await self.get_by_id(user_id)).username
