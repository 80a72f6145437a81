"""ASGI middleware for request logging and last-resort exception handling."""

from __future__ import annotations

import time

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

# ---------------------------------------------------------------------------
# Request logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "{method} {path} → {status} ({ms:.0f}ms)",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            ms=elapsed_ms,
        )
        return response


# ---------------------------------------------------------------------------
# Exception handler
# ---------------------------------------------------------------------------


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into a generic 500 response.

    The exception is logged with its traceback; the response body never
    carries internal details.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled exception on {method} {path}",
                method=request.method,
                path=request.url.path,
            )
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
