"""Byte-oriented cache backend contract.

A backend stores opaque bytes under string keys with a per-key TTL. A get on
an absent or expired key returns None; that is the sentinel miss and not an
error. Transport failures raise CacheBackendError so callers can tell an
unreachable cache from an empty one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheBackendError(Exception):
    """Connectivity or transport failure talking to the cache."""


class CacheBackend(ABC):
    """Abstract base class for cache backends."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None on a miss."""
        ...

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store bytes under key, replacing any previous value.

        Args:
            key: Cache key
            value: Payload bytes
            ttl: Time-to-live in seconds (0 = no expiry)
        """
        ...

    @abstractmethod
    async def delete(self, *keys: str) -> None:
        """Delete keys. Deleting an absent key is not an error."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a live entry exists under key."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Check connectivity."""
        ...

    @abstractmethod
    async def flush_all(self) -> None:
        """Remove every key in the backend's database."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the backend."""
        ...
