"""Domain models, identifiers, errors and collaborator contracts."""

from tigertail.core.errors import (
    AuthError,
    PostValidationError,
    RecordNotFound,
    StoreError,
    TigertailError,
)
from tigertail.core.ids import generate_post_id
from tigertail.core.model import UNKNOWN_USERNAME, Post, PostWithUser, User
from tigertail.core.ports import IdentityProvider, PostStore

__all__ = [
    # Models
    "Post",
    "PostWithUser",
    "User",
    "UNKNOWN_USERNAME",
    "generate_post_id",
    # Contracts
    "PostStore",
    "IdentityProvider",
    # Errors
    "TigertailError",
    "RecordNotFound",
    "StoreError",
    "PostValidationError",
    "AuthError",
]
