"""Persistence layer: SQLAlchemy engine, tables and repositories."""

from tigertail.persistence.db import (
    close_db,
    get_engine,
    get_session,
    get_session_factory,
    health_check,
    init_db,
    session_context,
)
from tigertail.persistence.repositories import PostRepository, UserRepository

__all__ = [
    "close_db",
    "get_engine",
    "get_session",
    "get_session_factory",
    "health_check",
    "init_db",
    "session_context",
    "PostRepository",
    "UserRepository",
]
