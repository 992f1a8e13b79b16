"""Cache key schema for Tiger-Tail.

Key format:
- posts_with_user: the feed listing (posts joined with author names)
- posts: the listing without the author join; nothing here writes it any
  more, but it is deleted together with the feed listing
- post:{id}: a single post

Listing keys are not parameterized by page or limit: whichever page was
populated last is what a cache hit returns.
"""

from __future__ import annotations


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    LISTING = "posts_with_user"
    LISTING_WITHOUT_USER = "posts"
    POST_PREFIX = "post:"

    @classmethod
    def post(cls, post_id: str) -> str:
        """Key for a single post."""
        return f"{cls.POST_PREFIX}{post_id}"

    @classmethod
    def listings(cls) -> tuple[str, str]:
        """Every listing key, for bulk invalidation."""
        return (cls.LISTING, cls.LISTING_WITHOUT_USER)
