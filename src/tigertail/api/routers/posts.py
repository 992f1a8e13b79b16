"""Posts API router.

Endpoints:
- GET    /api/posts              - Feed listing (cache first, paginated)
- POST   /api/posts              - Create a post (Basic auth)
- GET    /api/posts/{post_id}    - Single post (cache first)
- PUT    /api/posts/{post_id}    - Replace post content (Basic auth)
- DELETE /api/posts/{post_id}    - Delete a post (Basic auth)

Read responses carry source="cache" or source="database".
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, Response

from tigertail.api.deps import (
    get_creation_coordinator,
    get_listing_handler,
    get_modification_coordinator,
)
from tigertail.api.errors import from_domain_error
from tigertail.api.pagination import Pagination, pagination_params, parse_fields, project_fields
from tigertail.core.errors import TigertailError
from tigertail.security.auth import Credentials, get_credentials
from tigertail.services.creation import CreationCoordinator, ModificationCoordinator
from tigertail.services.listing import ListingRequestHandler

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get("")
async def list_posts(
    pagination: Pagination = Depends(pagination_params),
    fields: Annotated[str | None, Query(description="Comma-separated fields to return")] = None,
    handler: ListingRequestHandler = Depends(get_listing_handler),
) -> dict[str, Any]:
    """Get a page of the feed.

    On a cache hit the cached page is returned as stored: page and limit are
    echoed but do not select a sub-range of it.
    """
    try:
        result = await handler.list_posts(pagination.page, pagination.limit)
    except TigertailError as e:
        raise from_domain_error(e, "Failed to get posts") from e

    return {
        "posts": project_fields(result.posts, parse_fields(fields)),
        "page": result.page,
        "limit": result.limit,
        "total": result.total,
        "source": result.source,
    }


@router.post("", status_code=201)
async def create_post(
    request: Request,
    credentials: Credentials | None = Depends(get_credentials),
    coordinator: CreationCoordinator = Depends(get_creation_coordinator),
) -> dict[str, Any]:
    """Create a post authored by the configured admin user."""
    try:
        post = await coordinator.create(credentials, await request.body())
    except TigertailError as e:
        raise from_domain_error(e, "Failed to create post") from e

    return {"post": post.model_dump(mode="json"), "message": "Post created successfully"}


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    handler: ListingRequestHandler = Depends(get_listing_handler),
) -> dict[str, Any]:
    """Get a single post."""
    try:
        result = await handler.get_post(post_id)
    except TigertailError as e:
        raise from_domain_error(e, "Failed to get post") from e

    return {"post": result.post.model_dump(mode="json"), "source": result.source}


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    request: Request,
    credentials: Credentials | None = Depends(get_credentials),
    coordinator: ModificationCoordinator = Depends(get_modification_coordinator),
) -> dict[str, Any]:
    """Replace the content of a post owned by the admin user."""
    try:
        post = await coordinator.update(credentials, post_id, await request.body())
    except TigertailError as e:
        raise from_domain_error(e, "Failed to update post") from e

    return {"post": post.model_dump(mode="json"), "message": "Post updated successfully"}


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    credentials: Credentials | None = Depends(get_credentials),
    coordinator: ModificationCoordinator = Depends(get_modification_coordinator),
) -> Response:
    """Delete a post owned by the admin user."""
    try:
        await coordinator.delete(credentials, post_id)
    except TigertailError as e:
        raise from_domain_error(e, "Failed to delete post") from e

    return Response(status_code=204)
