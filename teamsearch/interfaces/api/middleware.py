"""
API Middleware - Request/response processing.

Provides:
- Request ID tracking
- Response latency measurement with slow-request warnings
- Error handling with taxonomy codes
- No-store cache headers on API responses
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from teamsearch.config.errors import ErrorCode, TeamSearchError

logger = logging.getLogger(__name__)

_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach request ID for tracing; malformed client IDs are replaced."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        incoming = request.headers.get("X-Request-ID", "")
        request_id = incoming if _REQUEST_ID.match(incoming) else uuid.uuid4().hex
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class LatencyMiddleware(BaseHTTPMiddleware):
    """Log request latency; requests over ``slow_ms`` are logged as warnings."""

    def __init__(self, app: ASGIApp, slow_ms: float = 1500.0) -> None:
        super().__init__(app)
        self.slow_ms = slow_ms

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        logger.log(
            logging.WARNING if duration_ms > self.slow_ms else logging.INFO,
            "%s %s status=%d latency_ms=%.2f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            getattr(request.state, "request_id", "unknown"),
        )
        return response


class NoStoreMiddleware(BaseHTTPMiddleware):
    """Mark API responses as uncacheable."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            response.headers["Cache-Control"] = "no-store"
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert TeamSearchError exceptions to structured JSON responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except TeamSearchError as e:
            request_id = getattr(request.state, "request_id", "unknown")
            status = error_code_to_status(e.code)
            logger.log(
                logging.ERROR if status >= 500 else logging.WARNING,
                "%s on %s: %s request_id=%s details=%s",
                e.code.value,
                request.url.path,
                e.message,
                request_id,
                e.details,
            )
            return _error_response(status, e.to_dict(), request_id)
        except Exception as e:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception("Unhandled error: %s request_id=%s", str(e), request_id)
            error = {
                "code": ErrorCode.INTERNAL_ERROR.value,
                "message": "Internal server error",
                "details": {},
            }
            return _error_response(500, error, request_id)


def _error_response(status: int, error: dict, request_id: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": error, "request_id": request_id})


def error_code_to_status(code: ErrorCode) -> int:
    """Map error codes to HTTP status codes."""
    mapping = {
        # 400 Bad Request
        ErrorCode.VALIDATION_ERROR: 400,
        # 429 Rate Limited
        ErrorCode.EMBEDDING_RATE_LIMITED: 429,
        # 502 Bad Gateway (upstream answered, but not usefully)
        ErrorCode.EMBEDDING_REJECTED: 502,
        ErrorCode.EMBEDDING_INVALID_RESPONSE: 502,
        ErrorCode.VECTOR_STORE_FAILED: 502,
        ErrorCode.CATALOG_INVALID: 502,
        # 503 Service Unavailable
        ErrorCode.EMBEDDING_UNAVAILABLE: 503,
        ErrorCode.VECTOR_STORE_UNAVAILABLE: 503,
        ErrorCode.CATALOG_UNAVAILABLE: 503,
        ErrorCode.CONFIG_MISSING: 503,
    }
    return mapping.get(code, 500)
