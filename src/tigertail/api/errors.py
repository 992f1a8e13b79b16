"""Error responses for the Tiger-Tail API.

Every error leaves the API in the same shape:

    {"error": "<text>"}

Routers raise ApiError subclasses. Domain errors that escape a router are
mapped by the registered handler, and anything else becomes a generic 500.
"""

from __future__ import annotations

import logging
from typing import cast

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ExceptionHandler

from tigertail.core.errors import (
    AuthError,
    PostValidationError,
    RecordNotFound,
    StoreError,
    TigertailError,
)

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(self, status_code: int, text: str, headers: dict[str, str] | None = None):
        self.text = text
        super().__init__(status_code=status_code, detail=text, headers=headers)

    def to_body(self) -> dict[str, str]:
        return {"error": self.text}


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, text: str):
        super().__init__(status_code=400, text=text)


class UnauthorizedError(ApiError):
    """Missing or rejected credentials (401)."""

    def __init__(self, text: str = "Unauthorized"):
        super().__init__(
            status_code=401,
            text=text,
            headers={"WWW-Authenticate": 'Basic realm="tigertail"'},
        )


class NotFoundError(ApiError):
    """Resource not found (404)."""

    def __init__(self, text: str = "Post not found"):
        super().__init__(status_code=404, text=text)


class InternalServerError(ApiError):
    """Internal server error (500)."""

    def __init__(self, text: str = "An unexpected error occurred"):
        super().__init__(status_code=500, text=text)


def from_domain_error(exc: TigertailError, failure_text: str | None = None) -> ApiError:
    """Map a domain error onto its API error.

    Args:
        exc: The domain error
        failure_text: Text reported for store failures; defaults to the
            generic 500 text
    """
    if isinstance(exc, AuthError):
        return UnauthorizedError()
    if isinstance(exc, PostValidationError):
        return BadRequestError(str(exc))
    if isinstance(exc, RecordNotFound):
        return NotFoundError(f"{exc.kind} not found")
    if isinstance(exc, StoreError) and failure_text is not None:
        return InternalServerError(failure_text)
    return InternalServerError()


async def api_exception_handler(request: Request, exc: ApiError) -> ORJSONResponse:
    """Exception handler for API errors."""
    return ORJSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    """Exception handler for framework errors (unknown route, bad auth header)."""
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


async def domain_exception_handler(request: Request, exc: TigertailError) -> ORJSONResponse:
    """Exception handler for domain errors not mapped by a router."""
    if isinstance(exc, StoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return await api_exception_handler(request, from_domain_error(exc))


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return ORJSONResponse(status_code=500, content=InternalServerError().to_body())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the API error handlers on an application."""
    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(
        StarletteHTTPException, cast(ExceptionHandler, http_exception_handler)
    )
    app.add_exception_handler(TigertailError, cast(ExceptionHandler, domain_exception_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))
