"""HTTP middleware for the Tiger-Tail API."""

from tigertail.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
