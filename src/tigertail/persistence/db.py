"""Async database engine and session factory.

Provides PostgreSQL async connectivity using SQLAlchemy 2.0 asyncio
extension with asyncpg driver. Without a configured database the engine
falls back to an in-memory SQLite database through aiosqlite.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import AsyncIterator

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tigertail.config import redact_url, settings

logger = logging.getLogger(__name__)

# Module-level engine (initialized lazily)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine_for_url(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pool settings suited to the driver."""
    if url.startswith("sqlite"):
        # One shared connection keeps an in-memory database alive
        return create_async_engine(
            url,
            poolclass=StaticPool,
            echo=echo,
        )
    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,  # Verify connection health
        echo=echo,
    )


def get_engine() -> AsyncEngine:
    """Get or create the async database engine."""
    global _engine
    if _engine is None:
        url = settings.effective_database_url
        logger.info("Connecting to database at %s", redact_url(url))
        _engine = create_engine_for_url(url)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a session for FastAPI dependency injection.

    Usage:
        @router.get("/")
        async def handler(session: AsyncSession = Depends(get_session)):
            ...
    """
    session = get_session_factory()()
    try:
        yield session
    finally:
        await session.close()


@asynccontextmanager
async def session_context() -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def create_schema(engine: AsyncEngine) -> None:
    """Create tables if they do not exist."""
    from tigertail.persistence.tables import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_admin_user(session: AsyncSession, user_id: str, username: str) -> bool:
    """Insert the default author if missing. Returns True if a row was added."""
    from tigertail.persistence.tables import UserTable

    existing = await session.execute(select(UserTable.id).where(UserTable.id == user_id))
    if existing.first() is not None:
        return False
    now = datetime.now(UTC)
    session.add(UserTable(id=user_id, username=username, created_at=now, updated_at=now))
    await session.commit()
    return True


async def init_db() -> None:
    """Initialize database (create tables, seed the default author).

    For production, manage the schema with migrations instead.
    """
    await create_schema(get_engine())
    async with session_context() as session:
        username = settings.auth_username.get_secret_value()
        if await seed_admin_user(session, settings.admin_user_id, username):
            logger.info("Created default user: %s", settings.admin_user_id)
    logger.info("Database initialized")


async def close_db() -> None:
    """Close database connections."""
    global _engine, _session_factory
    if _engine is not None:
        logger.info("Closing database connection")
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def health_check() -> bool:
    """Check database connectivity."""
    try:
        async with session_context() as session:
            await session.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError):
        return False
