"""Microblog domain models.

Posts are owned by the primary store. PostWithUser is the read-only
projection produced by the listing and detail joins; it is recomputed on
every store read and never written back.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

# Display name reported for posts whose author row is missing
UNKNOWN_USERNAME = "unknown"


class Post(BaseModel):
    """A microblog post."""

    model_config = {"extra": "ignore"}

    id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime


class PostWithUser(Post):
    """A post joined with its author's display name."""

    username: str


class User(BaseModel):
    """A registered author. The password never leaves the store."""

    model_config = {"extra": "ignore"}

    id: str
    username: str
    created_at: datetime
    updated_at: datetime
