"""Core types and data models for taskboard.

Every domain model is frozen; use ``model_copy(update={...})`` to derive a
modified version.  The ownership chain is strictly ``User -> Project -> Task``.
"""
from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utcnow() -> datetime:
    return datetime.now(UTC)


class TaskStatus(StrEnum):
    """Task lifecycle status.

    Any status may be reached from any other; only the ``completed_at``
    bookkeeping is governed (see :func:`taskboard.core.lifecycle.apply_status`).
    """
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"


class UserProfile(BaseModel):
    """Public view of a user - never carries the password hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    country: str


class User(BaseModel):
    """Registered user.

    ``email`` is stored lower-cased and is unique across the store.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=255)
    password_hash: str = Field(..., min_length=1, repr=False)
    created_at: datetime = Field(default_factory=utcnow)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_profile(self) -> UserProfile:
        return UserProfile(id=self.id, name=self.name, email=self.email, country=self.country)


class AuthResult(BaseModel):
    """Outcome of a successful registration or login."""

    model_config = ConfigDict(frozen=True)

    user: UserProfile
    token: str

    def model_dump_public(self) -> dict[str, Any]:
        """Flatten to the ``{"id", "name", "email", "country", "token"}`` shape."""
        return {**self.user.model_dump(mode="json"), "token": self.token}


class Project(BaseModel):
    """Project owned by exactly one user."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1, max_length=64)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id


class Task(BaseModel):
    """Task owned by exactly one project.

    ``completed_at`` is set if and only if ``status`` is ``COMPLETED``;
    construction rejects any other combination.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    status: TaskStatus = TaskStatus.TODO
    project_id: str = Field(..., min_length=1, max_length=64)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None

    @model_validator(mode="after")
    def _check_completion(self) -> Task:
        if (self.completed_at is not None) != (self.status == TaskStatus.COMPLETED):
            raise ValueError("completed_at must be set exactly when status is COMPLETED")
        return self


class _Patch(BaseModel):
    """Partial update with per-field presence tracking.

    A field counts as *provided* only when it was passed explicitly and, for
    strings, is non-empty after trimming.  Anything else leaves the stored
    value unchanged.
    """

    model_config = ConfigDict(frozen=True)

    def value_for(self, name: str) -> Any | None:
        if name not in self.model_fields_set:
            return None
        value = getattr(self, name)
        if isinstance(value, str) and not isinstance(value, Enum):
            value = value.strip()
            if not value:
                return None
        return value

    def provided(self) -> dict[str, Any]:
        """Return only the fields that would change something."""
        values = {name: self.value_for(name) for name in self.model_fields_set}
        return {name: value for name, value in values.items() if value is not None}


class ProjectPatch(_Patch):
    title: str | None = None
    description: str | None = None


class TaskPatch(_Patch):
    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None


__all__ = [
    "AuthResult",
    "Project",
    "ProjectPatch",
    "Task",
    "TaskPatch",
    "TaskStatus",
    "User",
    "UserProfile",
    "utcnow",
]
