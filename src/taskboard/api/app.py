"""FastAPI application factory.

Wiring
------
* :func:`create_app` builds the store and the :class:`~taskboard.service.TrackerService`
  eagerly and attaches them to ``app.state``; construction performs no I/O.
* The lifespan only runs store I/O: ``initialize()`` (create tables) on
  startup and ``close()`` on shutdown.
* Domain errors become ``{"success": false, "message": ...}`` responses via
  the exception handlers registered here; everything else is caught by
  :class:`~taskboard.middleware.request_logging.RequestLoggingMiddleware`.

Run with uvicorn::

    TASKBOARD_JWT_SECRET=... uvicorn --factory taskboard.api.app:create_app
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskboard.api.routes import auth_router, projects_router, tasks_router
from taskboard.core.config import TaskboardConfig
from taskboard.core.exceptions import (
    AuthenticationError,
    ForbiddenError,
    InvalidInputError,
    LimitExceededError,
    NotFoundError,
    TaskboardError,
)
from taskboard.middleware.request_logging import RequestLoggingMiddleware
from taskboard.service import TrackerService
from taskboard.storage.factory import StoreFactory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from taskboard.storage.tracker_store import TrackerStore

logger = logging.getLogger(__name__)

# Checked in order; subclasses must precede their bases
_STATUS_BY_ERROR: list[tuple[type[TaskboardError], int]] = [
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (LimitExceededError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
]


def _status_for(exc: TaskboardError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(
    status_code: int,
    message: str,
    **extra: Any,
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "message": message}
    content.update({k: v for k, v in extra.items() if v})
    return JSONResponse(status_code=status_code, content=content)


def _register_exception_handlers(app: FastAPI, debug: bool) -> None:
    @app.exception_handler(TaskboardError)
    async def _taskboard_error(request: Request, exc: TaskboardError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error(
                "Unexpected error %s %s: %s",
                request.method, request.url.path, exc.message,
                exc_info=exc,
            )
            return _error_response(
                status_code,
                "Server error",
                # Only expose internal details when debug mode is on
                details=exc.details if debug else None,
            )
        logger.info(
            "Rejected %s %s [%d]: %s",
            request.method, request.url.path, status_code, exc.message,
        )
        return _error_response(status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request",
            errors=errors,
        )


def create_app(
    config: TaskboardConfig | None = None,
    *,
    store: TrackerStore | None = None,
) -> FastAPI:
    """Build the taskboard API.

    Parameters
    ----------
    config:
        Settings; read from ``TASKBOARD_*`` environment variables when omitted.
    store:
        Override the store selected by ``config.storage_backend``.  Useful for
        tests with :class:`~taskboard.storage.memory.InMemoryTrackerStore`.
    """
    config = config if config is not None else TaskboardConfig()
    store = store if store is not None else StoreFactory.create(config)
    service = TrackerService.from_config(config, store)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await store.initialize()
        logger.info("taskboard started backend=%s", type(store).__name__)
        try:
            yield
        finally:
            await store.close()
            logger.info("taskboard stopped")

    app = FastAPI(
        title="taskboard",
        description="Personal project and task tracker",
        lifespan=lifespan,
    )
    app.state.taskboard_config = config
    app.state.tracker_store = store
    app.state.tracker_service = service

    app.add_middleware(RequestLoggingMiddleware, debug=config.debug)
    _register_exception_handlers(app, debug=config.debug)

    app.include_router(auth_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)

    @app.get("/health", tags=["ops"])
    async def health() -> dict[str, Any]:
        report = await service.health_check()
        report["timestamp"] = datetime.now(UTC).isoformat()
        return report

    return app


__all__ = ["create_app"]
