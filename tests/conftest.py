"""Global pytest fixtures.

Provides in-memory collaborators for the request orchestrators:
- store: a PostStore over a dict, with switchable failures
- identity: an IdentityProvider reading the same user table
- cache: a PostCacheCoordinator over MemoryCacheBackend with a manual clock
- runner: a fresh BackgroundRunner
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tigertail.cache.backend import CacheBackend, CacheBackendError
from tigertail.cache.coordinator import PostCacheCoordinator
from tigertail.cache.memory import MemoryCacheBackend
from tigertail.core.errors import RecordNotFound, StoreError
from tigertail.core.model import UNKNOWN_USERNAME, Post, PostWithUser
from tigertail.core.ports import IdentityProvider, PostStore
from tigertail.jobs.runner import BackgroundRunner
from tigertail.security.auth import Credentials, StaticCredentialGate

ADMIN_ID = "user_1"
ADMIN_NAME = "admin"
BASE_TIME = datetime(2020, 1, 10, 12, 0, tzinfo=UTC)


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePostStore(PostStore):
    """Dict-backed store recording every call."""

    def __init__(self) -> None:
        self.posts: dict[str, Post] = {}
        self.users: dict[str, str] = {ADMIN_ID: ADMIN_NAME}
        self.calls: list[str] = []
        self.failing: set[str] = set()

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failing:
            raise StoreError(f"{operation} unavailable")

    def add(self, post_id: str, content: str, minutes: int = 0, user_id: str = ADMIN_ID) -> Post:
        created = BASE_TIME + timedelta(minutes=minutes)
        post = Post(
            id=post_id, user_id=user_id, content=content, created_at=created, updated_at=created
        )
        self.posts[post_id] = post
        return post

    def _ordered(self) -> list[Post]:
        return sorted(self.posts.values(), key=lambda p: (p.created_at, p.id), reverse=True)

    async def get_by_id(self, post_id: str) -> Post:
        self._enter("get_by_id")
        if post_id not in self.posts:
            raise RecordNotFound("Post", post_id)
        return self.posts[post_id]

    async def create(self, post: Post) -> None:
        self._enter("create")
        self.posts[post.id] = post

    async def update(self, post: Post) -> None:
        self._enter("update")
        if post.id not in self.posts:
            raise RecordNotFound("Post", post.id)
        self.posts[post.id] = post

    async def delete(self, post_id: str) -> None:
        self._enter("delete")
        if self.posts.pop(post_id, None) is None:
            raise RecordNotFound("Post", post_id)

    async def list(self, offset: int, limit: int) -> list[PostWithUser]:
        self._enter("list")
        return [
            PostWithUser(
                **post.model_dump(), username=self.users.get(post.user_id, UNKNOWN_USERNAME)
            )
            for post in self._ordered()[offset : offset + limit]
        ]

    async def count(self) -> int:
        self._enter("count")
        return len(self.posts)


class FakeIdentityProvider(IdentityProvider):
    """Resolves usernames from a FakePostStore's user table."""

    def __init__(self, store: FakePostStore):
        self.store = store

    async def get_username(self, user_id: str) -> str:
        if user_id not in self.store.users:
            raise RecordNotFound("User", user_id)
        return self.store.users[user_id]


class UnreachableCacheBackend(CacheBackend):
    """Backend whose every operation fails like a dropped connection."""

    def _fail(self) -> None:
        raise CacheBackendError("connection refused")

    async def get(self, key: str) -> bytes | None:
        self._fail()
        return None

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self._fail()

    async def delete(self, *keys: str) -> None:
        self._fail()

    async def exists(self, key: str) -> bool:
        self._fail()
        return False

    async def ping(self) -> bool:
        return False

    async def flush_all(self) -> None:
        self._fail()

    async def close(self) -> None:
        pass


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def backend(clock: ManualClock) -> MemoryCacheBackend:
    return MemoryCacheBackend(clock=clock)


@pytest.fixture
def cache(backend: MemoryCacheBackend) -> PostCacheCoordinator:
    return PostCacheCoordinator(backend)


@pytest.fixture
def unreachable_cache() -> PostCacheCoordinator:
    return PostCacheCoordinator(UnreachableCacheBackend())


@pytest.fixture
def store() -> FakePostStore:
    return FakePostStore()


@pytest.fixture
def identity(store: FakePostStore) -> FakeIdentityProvider:
    return FakeIdentityProvider(store)


@pytest.fixture
def runner() -> BackgroundRunner:
    return BackgroundRunner()


@pytest.fixture
def gate() -> StaticCredentialGate:
    return StaticCredentialGate(ADMIN_NAME, "password")


@pytest.fixture
def admin_credentials() -> Credentials:
    return Credentials(username=ADMIN_NAME, password="password")
