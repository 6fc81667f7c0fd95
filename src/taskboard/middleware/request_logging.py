"""Request logging middleware - timing and last-resort error handling.

Domain errors (:class:`~taskboard.core.exceptions.TaskboardError`) are turned
into JSON responses by the exception handlers in :mod:`taskboard.api.app`.
Anything else that escapes a route lands here: it is logged with its
traceback and answered with an opaque 500.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger(__name__)

_DEFAULT_QUIET_PATHS: list[str] = [
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and latency.

    Parameters
    ----------
    app:
        The ASGI application (injected by Starlette's middleware machinery).
    quiet_paths:
        URL prefixes logged at DEBUG instead of INFO.
    debug:
        When ``True`` the 500 body includes the exception type.
    """

    def __init__(
        self,
        app: Any,
        *,
        quiet_paths: list[str] | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(app)
        self.quiet_paths: list[str] = (
            quiet_paths if quiet_paths is not None else list(_DEFAULT_QUIET_PATHS)
        )
        self.debug = debug

    def _is_quiet(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.quiet_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled error %s %s: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=True,
            )
            content: dict[str, Any] = {"success": False, "message": "Server error"}
            if self.debug:
                content["details"] = {"type": type(exc).__name__}
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=content,
            )

        elapsed_ms = (time.perf_counter() - start) * 1000
        level = logging.DEBUG if self._is_quiet(request.url.path) else logging.INFO
        logger.log(
            level,
            "Request %s %s [%d] %.2f ms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


__all__ = ["RequestLoggingMiddleware"]
