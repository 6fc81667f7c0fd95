"""FastAPI dependency-injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskboard.core.exceptions import AuthenticationError
from taskboard.service import TrackerService

_bearer = HTTPBearer(auto_error=False)


def get_service(request: Request) -> TrackerService:
    """Return the :class:`TrackerService` attached by :func:`~taskboard.api.app.create_app`."""
    service = getattr(request.app.state, "tracker_service", None)
    if service is None:
        raise RuntimeError(
            "tracker_service not found on app.state. "
            "Did you build the application with create_app()?"
        )
    return service


async def get_current_user_id(
    service: Annotated[TrackerService, Depends(get_service)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> str:
    """Resolve the ``Authorization: Bearer <token>`` header to a user id.

    Raises:
        AuthenticationError: If the header is missing or the token is invalid
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")
    return await service.authenticate(credentials.credentials)


Service = Annotated[TrackerService, Depends(get_service)]
CurrentUserId = Annotated[str, Depends(get_current_user_id)]


__all__ = ["CurrentUserId", "Service", "get_current_user_id", "get_service"]
