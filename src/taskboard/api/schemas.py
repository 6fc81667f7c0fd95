"""Request bodies for the HTTP API.

Shape checks only.  Domain rules (blank fields, project cap, ownership) are
enforced again by the service whichever way it is called.
"""
from __future__ import annotations

from pydantic import BaseModel, Field

from taskboard.core.types import ProjectPatch, TaskPatch, TaskStatus


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=10_000)


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=10_000)

    def to_patch(self) -> ProjectPatch:
        return ProjectPatch(**self.model_dump(exclude_unset=True))


class TaskCreate(BaseModel):
    project_id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=10_000)


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=10_000)
    status: TaskStatus | None = None

    def to_patch(self) -> TaskPatch:
        return TaskPatch(**self.model_dump(exclude_unset=True))


__all__ = [
    "LoginRequest",
    "ProjectCreate",
    "ProjectUpdate",
    "RegisterRequest",
    "TaskCreate",
    "TaskUpdate",
]
