"""Capability contracts for the primary store and identity lookups.

The request handlers depend only on these interfaces; the SQLAlchemy
repositories in tigertail.persistence are the production implementations.
Implementations raise RecordNotFound for unknown identifiers and StoreError
for any transport or query failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tigertail.core.model import Post, PostWithUser


class PostStore(ABC):
    """Durable record set of posts."""

    @abstractmethod
    async def get_by_id(self, post_id: str) -> Post:
        """Return the post with the given identifier."""
        ...

    @abstractmethod
    async def create(self, post: Post) -> None:
        """Persist a new post. The identifier is assigned by the caller."""
        ...

    @abstractmethod
    async def update(self, post: Post) -> None:
        """Replace content and update timestamp of an existing post."""
        ...

    @abstractmethod
    async def delete(self, post_id: str) -> None:
        """Remove a post."""
        ...

    @abstractmethod
    async def list(self, offset: int, limit: int) -> list[PostWithUser]:
        """Return a page of posts joined with author names, newest first."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of posts."""
        ...


class IdentityProvider(ABC):
    """Resolves author identifiers to display names."""

    @abstractmethod
    async def get_username(self, user_id: str) -> str:
        """Return the display name of a user."""
        ...
