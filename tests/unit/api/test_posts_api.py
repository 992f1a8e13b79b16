"""Tests for the posts API router."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tigertail.api.app import create_app
from tigertail.api.deps import (
    get_background_runner,
    get_identity_provider,
    get_post_cache,
    get_post_store,
    get_write_gate,
)
from tigertail.cache.coordinator import PostCacheCoordinator
from tigertail.cache.memory import MemoryCacheBackend

ADMIN = ("admin", "password")


class GatedBackend(MemoryCacheBackend):
    """Memory backend whose writes wait until released."""

    def __init__(self) -> None:
        super().__init__()
        self.release = asyncio.Event()

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        await self.release.wait()
        await super().set(key, value, ttl)


def build_app(cache, store, identity, runner, gate) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_post_cache] = lambda: cache
    app.dependency_overrides[get_post_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_background_runner] = lambda: runner
    app.dependency_overrides[get_write_gate] = lambda: gate
    return app


@pytest.fixture
def app(cache, store, identity, runner, gate) -> FastAPI:
    return build_app(cache, store, identity, runner, gate)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestListPosts:
    """Test GET /api/posts."""

    @pytest.mark.asyncio
    async def test_defaults(self, client: AsyncClient, store) -> None:
        """Default pagination and provenance are reported."""
        store.add("post_a", "hello")
        response = await client.get("/api/posts")
        assert response.status_code == 200
        data = response.json()
        assert data["page"] == 1
        assert data["limit"] == 10
        assert data["total"] == 1
        assert data["source"] == "database"
        assert data["posts"][0]["username"] == "admin"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("query", "page", "limit"),
        [
            ("?page=0&limit=-5", 1, 10),
            ("?page=abc&limit=xyz", 1, 10),
            ("?page=3&limit=5", 3, 5),
            ("?limit=5000", 1, 100),
            ("?page=10000000000000000000&limit=10", 1, 10),
        ],
    )
    async def test_lenient_pagination(
        self, client: AsyncClient, query: str, page: int, limit: int
    ) -> None:
        """Invalid values fall back to defaults; limit is clamped."""
        response = await client.get(f"/api/posts{query}")
        assert response.status_code == 200
        assert response.json()["page"] == page
        assert response.json()["limit"] == limit

    @pytest.mark.asyncio
    async def test_second_read_from_cache(self, client: AsyncClient, store, runner) -> None:
        """Once population settles the listing is served from the cache."""
        store.add("post_a", "hello")
        first = (await client.get("/api/posts")).json()
        await runner.drain(timeout=1.0)
        second = (await client.get("/api/posts")).json()
        assert first["source"] == "database"
        assert second["source"] == "cache"
        assert second["posts"] == first["posts"]

    @pytest.mark.asyncio
    async def test_field_projection(self, client: AsyncClient, store) -> None:
        """Only the requested known fields are returned."""
        store.add("post_a", "hello")
        response = await client.get("/api/posts?fields=id, content,bogus")
        assert response.json()["posts"] == [{"id": "post_a", "content": "hello"}]

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, client: AsyncClient, store) -> None:
        """A store failure on a cache miss is a 500."""
        store.failing.add("list")
        response = await client.get("/api/posts")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to get posts"}


class TestCreatePost:
    """Test POST /api/posts."""

    @pytest.mark.asyncio
    async def test_created(self, client: AsyncClient, store) -> None:
        """A valid authenticated create returns 201 with the post."""
        response = await client.post("/api/posts", json={"content": "hello"}, auth=ADMIN)
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Post created successfully"
        assert data["post"]["content"] == "hello"
        assert data["post"]["user_id"] == "user_1"
        assert data["post"]["id"] in store.posts

    @pytest.mark.asyncio
    async def test_missing_credentials(self, client: AsyncClient, store) -> None:
        """No credentials is a 401 with a Basic challenge."""
        response = await client.post("/api/posts", json={"content": "hello"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert response.headers["www-authenticate"].startswith("Basic")
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient) -> None:
        """Wrong credentials are a 401."""
        response = await client.post(
            "/api/posts", json={"content": "hello"}, auth=("admin", "guess")
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_body(self, client: AsyncClient) -> None:
        """A non-JSON body is a 400."""
        response = await client.post(
            "/api/posts",
            content=b"content=hello",
            headers={"content-type": "application/json"},
            auth=ADMIN,
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    @pytest.mark.asyncio
    async def test_empty_content(self, client: AsyncClient) -> None:
        """Empty content is a 400."""
        response = await client.post("/api/posts", json={"content": ""}, auth=ADMIN)
        assert response.status_code == 400
        assert response.json() == {"error": "Content is required"}

    @pytest.mark.asyncio
    async def test_store_failure(self, client: AsyncClient, store) -> None:
        """A failed write is a 500."""
        store.failing.add("create")
        response = await client.post("/api/posts", json={"content": "hello"}, auth=ADMIN)
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create post"}


class TestPostRoundTrip:
    """A created post reads back identically."""

    @pytest.mark.asyncio
    async def test_read_back_from_store_and_cache(self, client: AsyncClient, runner) -> None:
        """Identity, author, content and timestamps survive both read paths."""
        created = (
            await client.post("/api/posts", json={"content": "round trip"}, auth=ADMIN)
        ).json()["post"]
        await runner.drain(timeout=1.0)

        fresh = (await client.get(f"/api/posts/{created['id']}")).json()
        await runner.drain(timeout=1.0)
        cached = (await client.get(f"/api/posts/{created['id']}")).json()

        assert fresh["source"] == "database"
        assert cached["source"] == "cache"
        for view in (fresh["post"], cached["post"]):
            for field in ("id", "user_id", "content", "created_at", "updated_at"):
                assert view[field] == created[field]


class TestScenarioA:
    """Create on an empty cache, then read before population lands."""

    @pytest.mark.asyncio
    async def test_read_before_population(self, store, identity, runner, gate) -> None:
        """The read is answered by the store and includes the new post."""
        backend = GatedBackend()
        app = build_app(PostCacheCoordinator(backend), store, identity, runner, gate)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            created = await ac.post("/api/posts", json={"content": "hello"}, auth=ADMIN)
            assert created.status_code == 201
            assert created.json()["post"]["content"] == "hello"

            listing = (await ac.get("/api/posts")).json()
            assert listing["source"] == "database"
            assert created.json()["post"]["id"] in [p["id"] for p in listing["posts"]]

            backend.release.set()
            assert await runner.drain(timeout=1.0)
            assert (await ac.get("/api/posts")).json()["source"] == "cache"


class TestSinglePost:
    """Test GET/PUT/DELETE /api/posts/{post_id}."""

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient) -> None:
        """Unknown posts are a 404."""
        response = await client.get("/api/posts/post_missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, store) -> None:
        """Owner can replace content."""
        store.add("post_a", "before")
        response = await client.put("/api/posts/post_a", json={"content": "after"}, auth=ADMIN)
        assert response.status_code == 200
        assert response.json()["message"] == "Post updated successfully"
        assert response.json()["post"]["content"] == "after"

    @pytest.mark.asyncio
    async def test_update_not_owned(self, client: AsyncClient, store) -> None:
        """Other authors' posts look absent."""
        store.add("post_a", "theirs", user_id="user_2")
        response = await client.put("/api/posts/post_a", json={"content": "x"}, auth=ADMIN)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, store) -> None:
        """Owner can delete."""
        store.add("post_a", "bye")
        response = await client.delete("/api/posts/post_a", auth=ADMIN)
        assert response.status_code == 204
        assert "post_a" not in store.posts

    @pytest.mark.asyncio
    async def test_delete_unauthenticated(self, client: AsyncClient, store) -> None:
        """Delete without credentials is a 401."""
        store.add("post_a", "keep")
        response = await client.delete("/api/posts/post_a")
        assert response.status_code == 401
        assert "post_a" in store.posts


class TestFrameworkErrors:
    """Framework errors use the same error shape."""

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, client: AsyncClient) -> None:
        """Unsupported methods render an error body."""
        response = await client.patch("/api/posts")
        assert response.status_code == 405
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_correlation_headers(self, client: AsyncClient) -> None:
        """Request id is echoed back."""
        response = await client.get("/health", headers={"x-request-id": "req-123"})
        assert response.headers["x-request-id"] == "req-123"
        assert response.headers["x-correlation-id"] == "req-123"
