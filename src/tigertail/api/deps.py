"""Shared FastAPI dependencies for Tiger-Tail routers.

Wires the request orchestrators to their collaborators. Tests replace the
leaf providers (store, identity, cache, runner, auth gate) through
app.dependency_overrides.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tigertail.cache.coordinator import PostCacheCoordinator
from tigertail.cache.factory import get_cache_backend
from tigertail.config import settings
from tigertail.core.ports import IdentityProvider, PostStore
from tigertail.jobs.runner import BackgroundRunner, get_runner
from tigertail.persistence.db import get_session
from tigertail.persistence.repositories import PostRepository, UserRepository
from tigertail.security.auth import AuthGate, get_auth_gate
from tigertail.services.creation import CreationCoordinator, ModificationCoordinator
from tigertail.services.listing import ListingRequestHandler

# =============================================================================
# Leaf collaborators
# =============================================================================


async def get_post_store(session: AsyncSession = Depends(get_session)) -> PostStore:
    """Get post repository instance."""
    return PostRepository(session)


async def get_identity_provider(
    session: AsyncSession = Depends(get_session),
) -> IdentityProvider:
    """Get user repository instance."""
    return UserRepository(session)


async def get_post_cache() -> PostCacheCoordinator:
    """Get the cache coordinator over the configured backend."""
    return PostCacheCoordinator(await get_cache_backend(), ttl=settings.cache_ttl)


def get_background_runner() -> BackgroundRunner:
    return get_runner()


def get_write_gate() -> AuthGate:
    return get_auth_gate()


# =============================================================================
# Orchestrators
# =============================================================================


async def get_listing_handler(
    cache: PostCacheCoordinator = Depends(get_post_cache),
    store: PostStore = Depends(get_post_store),
    identity: IdentityProvider = Depends(get_identity_provider),
    runner: BackgroundRunner = Depends(get_background_runner),
) -> ListingRequestHandler:
    return ListingRequestHandler(cache=cache, store=store, identity=identity, runner=runner)


async def get_creation_coordinator(
    cache: PostCacheCoordinator = Depends(get_post_cache),
    store: PostStore = Depends(get_post_store),
    gate: AuthGate = Depends(get_write_gate),
    runner: BackgroundRunner = Depends(get_background_runner),
) -> CreationCoordinator:
    return CreationCoordinator(
        cache=cache,
        store=store,
        gate=gate,
        runner=runner,
        author_id=settings.admin_user_id,
        refresh_limit=settings.default_page_size,
    )


async def get_modification_coordinator(
    cache: PostCacheCoordinator = Depends(get_post_cache),
    store: PostStore = Depends(get_post_store),
    gate: AuthGate = Depends(get_write_gate),
    runner: BackgroundRunner = Depends(get_background_runner),
) -> ModificationCoordinator:
    return ModificationCoordinator(
        cache=cache,
        store=store,
        gate=gate,
        runner=runner,
        author_id=settings.admin_user_id,
    )
