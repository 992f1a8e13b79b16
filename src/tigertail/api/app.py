"""FastAPI application factory for Tiger-Tail.

Creates the application with:
- The posts API (/api/posts) and the service/health routes
- Lifecycle management for the database, the cache backend and the
  background runner
- Request correlation for logs
- {"error": ...} error responses
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from tigertail import __version__
from tigertail.api.errors import register_exception_handlers
from tigertail.api.middleware import CorrelationMiddleware
from tigertail.api.routers import health, posts
from tigertail.cache.factory import close_cache_backend, get_cache_backend
from tigertail.config import settings
from tigertail.jobs.runner import get_runner, stop_runner
from tigertail.observability import configure_logging
from tigertail.persistence.db import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Create the schema and seed the default author
    - Open the cache backend
    - Start the background runner

    On shutdown:
    - Drain background cache work for the grace period, cancel the rest
    - Close the cache backend
    - Close database connections
    """
    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )

    logger.info("Starting Tiger-Tail (%s)", settings.env)
    await init_db()
    await get_cache_backend()
    get_runner()
    logger.info("Tiger-Tail startup complete")

    yield

    logger.info("Shutting down Tiger-Tail")
    await stop_runner(settings.background_shutdown_grace)
    await close_cache_backend()
    await close_db()
    logger.info("Tiger-Tail shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Tiger-Tail",
        description="Microblog feed API with a cache-aside read path",
        version=__version__,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(posts.router)

    return app


app = create_app()
