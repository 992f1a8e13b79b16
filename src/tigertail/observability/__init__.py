"""Observability for Tiger-Tail: structured logging with request correlation."""

from tigertail.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    configure_logging,
    correlation_id_var,
    request_id_var,
)

__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "configure_logging",
    "correlation_id_var",
    "request_id_var",
]
