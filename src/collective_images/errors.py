"""Custom exceptions and centralized FastAPI error handlers.

Every error carries the HTTP status and headers it should be answered
with. Bodies are plain text, which is what badge and image consumers
(README renderers, <img> tags) expect.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class CollectiveImagesError(Exception):
    """Base exception with HTTP status code and optional response headers."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.headers = headers or {}


class NotFoundError(CollectiveImagesError):
    def __init__(self, message: str = "Not found", headers: dict[str, str] | None = None):
        super().__init__(message, status_code=404, headers=headers)


class UpstreamNotFoundError(NotFoundError):
    """The graph service reports that the requested entity does not exist."""


class UpstreamFetchError(CollectiveImagesError):
    """An external image or badge could not be fetched."""

    def __init__(self, url: str, headers: dict[str, str] | None = None):
        super().__init__(f"Unable to fetch {url}", status_code=500, headers=headers)
        self.url = url


class TransformError(CollectiveImagesError):
    """An image could not be converted, measured or composed."""


class GraphQLError(Exception):
    """The graph service answered with errors.

    Not an HTTP error by itself: handlers decide whether it maps to a
    client response or falls through to the generic 500 handler.
    """

    def __init__(self, messages: list[str]):
        super().__init__("; ".join(messages) or "GraphQL request failed")
        self.messages = messages


def error_headers(request: Request, headers: dict[str, str] | None = None) -> dict[str, str]:
    """Headers for an error response.

    Routes may pin a Cache-Control policy on ``request.state.cache_control``
    that applies to all of their responses; the error's own Cache-Control
    takes precedence.
    """
    merged = dict(headers or {})
    cache_control = getattr(request.state, "cache_control", None)
    if cache_control and not any(name.lower() == "cache-control" for name in merged):
        merged["Cache-Control"] = cache_control
    return merged


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(CollectiveImagesError)
    async def handle_collective_images_error(request: Request, exc: CollectiveImagesError):
        return PlainTextResponse(
            str(exc),
            status_code=exc.status_code,
            headers=error_headers(request, exc.headers),
        )

    @app.exception_handler(ValidationError)
    async def handle_query_error(request: Request, exc: ValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        return PlainTextResponse(
            f"Invalid query: {details}",
            status_code=422,
            headers=error_headers(request),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return PlainTextResponse(
            "Internal server error",
            status_code=500,
            headers=error_headers(request),
        )
