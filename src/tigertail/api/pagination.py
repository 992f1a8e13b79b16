"""Page/limit pagination and field projection for the feed endpoint.

Pagination is lenient: a missing, non-integer or non-positive value falls
back to its default instead of failing the request, and a limit above the
configured ceiling is clamped to it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Query
from pydantic import BaseModel

from tigertail.config import settings

DEFAULT_PAGE = 1

# Offsets and limits are bound as signed 64-bit SQL integers
MAX_INT64 = 2**63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")

# Fields a client may select with ?fields=
PROJECTABLE_FIELDS = ("id", "user_id", "content", "created_at", "updated_at", "username")


@dataclass(frozen=True)
class Pagination:
    """Validated pagination parameters."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(raw: str | None) -> int | None:
    """Parse a positive base-10 integer that fits in a signed 64-bit column.

    Only an optional sign and ASCII digits are accepted; int() extras such
    as underscores or non-ASCII digits are rejected.
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not _INTEGER.fullmatch(raw):
        return None
    value = int(raw)
    return value if 0 < value <= MAX_INT64 else None


def parse_pagination(
    page: str | None,
    limit: str | None,
    default_limit: int | None = None,
    max_limit: int | None = None,
) -> Pagination:
    """Validate raw page/limit query values.

    Args:
        page: Raw page value; defaults to 1
        limit: Raw limit value; defaults to default_limit
        default_limit: Page size used when limit is absent or invalid
        max_limit: Ceiling applied to limit

    Returns:
        Pagination with page >= 1 and 1 <= limit <= max_limit
    """
    default_limit = settings.default_page_size if default_limit is None else default_limit
    max_limit = settings.max_page_size if max_limit is None else max_limit

    parsed_limit = min(_positive_int(limit) or default_limit, max_limit)
    parsed_page = _positive_int(page) or DEFAULT_PAGE
    # A page whose offset cannot be bound is as invalid as a malformed one
    if (parsed_page - 1) * parsed_limit > MAX_INT64:
        parsed_page = DEFAULT_PAGE
    return Pagination(page=parsed_page, limit=parsed_limit)


def pagination_params(
    page: Annotated[str | None, Query(description="1-based page number")] = None,
    limit: Annotated[str | None, Query(description="Page size")] = None,
) -> Pagination:
    """FastAPI dependency for page/limit query parameters."""
    return parse_pagination(page, limit)


def parse_fields(raw: str | None) -> list[str] | None:
    """Split a comma-separated fields parameter. None means all fields."""
    if not raw:
        return None
    fields = [field.strip() for field in raw.split(",")]
    return [field for field in fields if field]


def project_fields(
    items: Sequence[BaseModel], fields: Iterable[str] | None
) -> list[dict[str, Any]]:
    """Dump models to JSON-ready dicts, keeping only the selected fields.

    Unknown field names are ignored, as are fields a model does not have.
    """
    dumped = [item.model_dump(mode="json") for item in items]
    if fields is None:
        return dumped
    selected = [field for field in dict.fromkeys(fields) if field in PROJECTABLE_FIELDS]
    return [{field: data[field] for field in selected if field in data} for data in dumped]
