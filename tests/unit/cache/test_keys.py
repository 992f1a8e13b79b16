"""Tests for cache key generation."""

from tigertail.cache.keys import CacheKeys


class TestCacheKeys:
    """Test cache key generation."""

    def test_listing_keys_are_fixed(self) -> None:
        """Listing keys carry no pagination component."""
        assert CacheKeys.LISTING == "posts_with_user"
        assert CacheKeys.LISTING_WITHOUT_USER == "posts"

    def test_post_key(self) -> None:
        """Post key is the prefix followed by the identifier."""
        assert CacheKeys.post("post_abc") == "post:post_abc"

    def test_listings_covers_both_listing_keys(self) -> None:
        """Bulk invalidation targets both listing keys and no post key."""
        assert set(CacheKeys.listings()) == {"posts_with_user", "posts"}
