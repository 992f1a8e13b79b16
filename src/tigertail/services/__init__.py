"""Request orchestration for the feed read path and the write path."""

from tigertail.services.creation import (
    CreationCoordinator,
    ModificationCoordinator,
    PostContent,
    parse_content,
)
from tigertail.services.listing import (
    SOURCE_CACHE,
    SOURCE_DATABASE,
    ListingPage,
    ListingRequestHandler,
    PostDetail,
)

__all__ = [
    "ListingRequestHandler",
    "ListingPage",
    "PostDetail",
    "SOURCE_CACHE",
    "SOURCE_DATABASE",
    "CreationCoordinator",
    "ModificationCoordinator",
    "PostContent",
    "parse_content",
]
