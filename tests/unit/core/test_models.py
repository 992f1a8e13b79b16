"""Tests for domain models and errors."""

from datetime import UTC, datetime

from tigertail.core.errors import RecordNotFound, TigertailError
from tigertail.core.model import Post, PostWithUser

CREATED = datetime(2026, 1, 10, 12, 0, tzinfo=UTC)


class TestPost:
    """Test Post and PostWithUser."""

    def test_extra_fields_ignored(self) -> None:
        """Unknown fields from older payloads are dropped."""
        post = Post.model_validate(
            {
                "id": "post_a",
                "user_id": "user_1",
                "content": "hi",
                "created_at": CREATED,
                "updated_at": CREATED,
                "likes": 3,
            }
        )
        assert not hasattr(post, "likes")

    def test_post_with_user_is_post(self) -> None:
        """The join projection extends Post."""
        post = PostWithUser(
            id="post_a",
            user_id="user_1",
            content="hi",
            created_at=CREATED,
            updated_at=CREATED,
            username="admin",
        )
        assert isinstance(post, Post)


class TestErrors:
    """Test domain errors."""

    def test_record_not_found(self) -> None:
        """RecordNotFound keeps the kind and identifier."""
        error = RecordNotFound("Post", "post_x")
        assert isinstance(error, TigertailError)
        assert error.kind == "Post"
        assert error.identifier == "post_x"
        assert str(error) == "Post with identifier 'post_x' not found"
