"""API middleware -- CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``LyricQueueError`` subclasses into JSON ``ErrorResponse``
bodies.

Starlette middleware is a stack (last added, first executed).  ``main.py``
adds ErrorHandlingMiddleware first and RequestLoggingMiddleware second, so
the request log sees the final status code after errors were mapped.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import (
    ConfigurationError,
    LyricQueueError,
    NotFoundError,
    UpstreamUnavailableError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[LyricQueueError], int], ...] = (
    (NotFoundError, 404),
    (UpstreamUnavailableError, 503),
    (ConfigurationError, 503),
)


def status_for_error(exc: LyricQueueError) -> int:
    """Return the HTTP status code used for *exc*."""
    for error_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]`` for
        development; override with specific origins in production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``LyricQueueError`` subclasses and return structured JSON errors.

    Missing artists, songs and cursors become 404; an unreachable catalog
    or lyrics source becomes 503.  Any other ``LyricQueueError`` is a
    500.  Stack traces stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except LyricQueueError as exc:
            status_code = status_for_error(exc)
            log = _logger.warning if status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status_code,
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
