"""Domain errors raised by the store, the write path and the auth gate.

Cache-layer failures are deliberately absent here: they never leave the
cache package (see tigertail.cache.backend and tigertail.cache.serializer).
"""

from __future__ import annotations


class TigertailError(Exception):
    """Base class for domain errors."""


class RecordNotFound(TigertailError):
    """The primary store has no record with the given identifier."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} with identifier '{identifier}' not found")


class StoreError(TigertailError):
    """Transport or query failure in the primary store."""


class PostValidationError(TigertailError):
    """A write was rejected before reaching the store."""


class AuthError(TigertailError):
    """Missing or invalid credentials for a write."""
