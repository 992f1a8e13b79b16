"""Service and health check endpoints.

- /         - Service banner
- /api      - API name and version
- /health   - Plain health report
- /livez    - Liveness probe (plain text, always OK while the process runs)
- /readyz   - Readiness probe (checks database and cache connectivity)
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import ORJSONResponse, PlainTextResponse

from tigertail import __version__
from tigertail.api.deps import get_post_cache
from tigertail.cache.coordinator import PostCacheCoordinator
from tigertail.persistence.db import health_check as db_health_check

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "Tiger-Tail Microblog API"
PROBE_TIMEOUT = 5.0


@router.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok", "message": SERVICE_NAME}


@router.get("/api")
async def api_info() -> dict[str, str]:
    return {"message": SERVICE_NAME, "version": __version__}


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/livez", response_class=PlainTextResponse)
async def livez() -> str:
    """Liveness probe."""
    return "OK."


async def database_ready() -> bool:
    """Check database connectivity with a bounded wait."""
    try:
        return await asyncio.wait_for(db_health_check(), timeout=PROBE_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("Database readiness check timed out")
        return False


async def cache_ready(cache: PostCacheCoordinator = Depends(get_post_cache)) -> bool:
    """Check cache connectivity with a bounded wait."""
    try:
        return await asyncio.wait_for(cache.ping(), timeout=PROBE_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("Cache readiness check timed out")
        return False


@router.get("/readyz")
async def readyz(
    database: bool = Depends(database_ready),
    cache: bool = Depends(cache_ready),
) -> ORJSONResponse:
    """Readiness probe.

    Returns 200 when the database and the cache both respond, 503 otherwise.
    """
    checks = {
        "database": "up" if database else "down",
        "cache": "up" if cache else "down",
    }
    ready = database and cache
    return ORJSONResponse(
        content={"status": "ready" if ready else "not ready", "checks": checks},
        status_code=200 if ready else 503,
    )
