"""Custom exceptions for taskboard.

All exceptions derive from :class:`TaskboardError` so callers can catch the
entire family with a single ``except TaskboardError`` clause.

Hierarchy::

    TaskboardError
    ├── InvalidInputError
    │   └── UserAlreadyExistsError
    ├── NotFoundError
    ├── ForbiddenError
    ├── LimitExceededError
    ├── AuthenticationError
    ├── StoreError
    └── ConfigurationError
"""

from __future__ import annotations

from typing import Any


class TaskboardError(Exception):
    """Base exception for all taskboard errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class InvalidInputError(TaskboardError):
    """Raised when a required field is missing, empty, or malformed."""

    def __init__(
        self,
        field: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(reason, details)
        self.field = field
        self.reason = reason


class UserAlreadyExistsError(InvalidInputError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("email", "User already exists", details)
        self.email = email


class NotFoundError(TaskboardError):
    """Raised when a resource id has no matching record."""

    def __init__(
        self,
        resource: str,
        resource_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"{resource.capitalize()} not found", details)
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(TaskboardError):
    """Raised when a resource exists but the acting user does not own it."""

    def __init__(
        self,
        resource: str,
        resource_id: str,
        user_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Not authorized to access this {resource}", details)
        self.resource = resource
        self.resource_id = resource_id
        self.user_id = user_id


class LimitExceededError(TaskboardError):
    """Raised when a user already owns the maximum number of projects."""

    def __init__(
        self,
        user_id: str,
        limit: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"You can only have up to {limit} projects", details)
        self.user_id = user_id
        self.limit = limit


class AuthenticationError(TaskboardError):
    """Raised when credentials or a bearer token cannot be verified.

    The message is safe to return to the client; the underlying cause is
    logged but never exposed.
    """

    def __init__(
        self,
        reason: str = "Not authorized",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(reason, details)
        self.reason = reason


class StoreError(TaskboardError):
    """Raised when the persistent store fails unexpectedly."""

    def __init__(
        self,
        operation: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Store operation {operation!r} failed: {reason}", details)
        self.operation = operation
        self.reason = reason


class ConfigurationError(TaskboardError):
    """Raised when :class:`~taskboard.core.config.TaskboardConfig` cannot be used."""

    def __init__(
        self,
        parameter: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Invalid configuration for {parameter!r}: {reason}", details)
        self.parameter = parameter
        self.reason = reason


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ForbiddenError",
    "InvalidInputError",
    "LimitExceededError",
    "NotFoundError",
    "StoreError",
    "TaskboardError",
    "UserAlreadyExistsError",
]
