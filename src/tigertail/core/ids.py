from __future__ import annotations

from typing import Final
from uuid import uuid4

POST_ID_PREFIX: Final[str] = "post_"


def generate_post_id() -> str:
    """Generate a globally unique post identifier."""
    return f"{POST_ID_PREFIX}{uuid4()}"
