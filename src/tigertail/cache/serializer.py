"""Cache payload encoding for posts and listings.

Listings are written as a version-tagged JSON object:

    {"v": 2, "posts": [...], "total": N}

Readers dispatch on the tag. Payloads written before the tag existed are
classified by shape instead, so every historical format stays readable:

- version 1: a bare JSON array of posts; total is the array length
- version 2: an object with "posts" and "total"; total may differ from the
  number of posts because it counts the whole feed, not the cached page

Decoding never raises anything but CacheDecodeError, which callers treat
exactly like a cache miss.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import orjson
from pydantic import TypeAdapter, ValidationError

from tigertail.core.model import Post, PostWithUser

ORJSON_OPTIONS = orjson.OPT_NON_STR_KEYS | orjson.OPT_UTC_Z

LISTING_SCHEMA_VERSION = 2
VERSION_FIELD = "v"

_post_adapter = TypeAdapter(Post)
_listing_adapter = TypeAdapter(list[PostWithUser])


class CacheDecodeError(ValueError):
    """Cached bytes could not be decoded into the expected shape."""


def _dumps(data: Any) -> bytes:
    return orjson.dumps(data, option=ORJSON_OPTIONS)


def _loads(data: bytes) -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise CacheDecodeError(f"malformed cache payload: {e}") from e


def _validate(adapter: TypeAdapter[Any], payload: Any) -> Any:
    try:
        return adapter.validate_python(payload)
    except ValidationError as e:
        raise CacheDecodeError(f"cache payload failed validation: {e}") from e


# -----------------------------------------------------------------------------
# Listing (posts joined with user)
# -----------------------------------------------------------------------------


def encode_listing(posts: Sequence[PostWithUser], total: int) -> bytes:
    """Encode a listing page and the feed total in the current schema."""
    return _dumps(
        {
            VERSION_FIELD: LISTING_SCHEMA_VERSION,
            "posts": [post.model_dump() for post in posts],
            "total": total,
        }
    )


def _decode_listing_v1(payload: Any) -> tuple[list[PostWithUser], int]:
    items = payload.get("posts") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise CacheDecodeError("version 1 listing must be a sequence of posts")
    posts: list[PostWithUser] = _validate(_listing_adapter, items)
    return posts, len(posts)


def _decode_listing_v2(payload: Any) -> tuple[list[PostWithUser], int]:
    if not isinstance(payload, dict):
        raise CacheDecodeError("version 2 listing must be an object")
    total = payload.get("total")
    # bool is an int subclass; reject it explicitly
    if not isinstance(total, int) or isinstance(total, bool) or total < 0:
        raise CacheDecodeError(f"invalid listing total: {total!r}")
    items = payload.get("posts")
    if not isinstance(items, list):
        raise CacheDecodeError("version 2 listing requires a posts sequence")
    posts: list[PostWithUser] = _validate(_listing_adapter, items)
    return posts, total


_LISTING_DECODERS: dict[int, Callable[[Any], tuple[list[PostWithUser], int]]] = {
    1: _decode_listing_v1,
    2: _decode_listing_v2,
}


def listing_schema_version(payload: Any) -> int:
    """Return the schema version of a parsed listing payload.

    Tagged payloads report their tag; untagged ones are classified by shape.
    """
    if isinstance(payload, list):
        return 1
    if isinstance(payload, dict):
        if VERSION_FIELD in payload:
            version = payload[VERSION_FIELD]
            if not isinstance(version, int) or isinstance(version, bool):
                raise CacheDecodeError(f"invalid listing schema tag: {version!r}")
            return version
        if "posts" in payload and "total" in payload:
            return 2
    raise CacheDecodeError("unrecognized listing payload shape")


def decode_listing(data: bytes) -> tuple[list[PostWithUser], int]:
    """Decode a cached listing into (posts, total).

    Raises:
        CacheDecodeError: If the payload matches no known schema version
    """
    payload = _loads(data)
    version = listing_schema_version(payload)
    decoder = _LISTING_DECODERS.get(version)
    if decoder is None:
        raise CacheDecodeError(f"unsupported listing schema version: {version}")
    return decoder(payload)


# -----------------------------------------------------------------------------
# Single post
# -----------------------------------------------------------------------------


def encode_post(post: Post) -> bytes:
    """Encode a single post.

    Only the Post fields are stored, even when given a PostWithUser.
    """
    return _dumps(post.model_dump(include=set(Post.model_fields)))


def decode_post(data: bytes) -> Post:
    """Decode a single post."""
    payload = _loads(data)
    if not isinstance(payload, dict):
        raise CacheDecodeError("post payload must be an object")
    return _validate(_post_adapter, payload)
