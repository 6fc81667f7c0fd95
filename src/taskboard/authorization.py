"""Ownership gate for projects and tasks.

A user may touch a project only if they own it, and a task only if they own
the task's parent project.  The gate only reads store state; it never
mutates anything.

A task whose parent project is missing is reported as *not found* rather
than *forbidden*, so callers never learn more about a resource than its
existence.
"""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from taskboard.core.exceptions import ForbiddenError, NotFoundError
from taskboard.core.types import Project, Task

if TYPE_CHECKING:
    from taskboard.storage.tracker_store import TrackerStore

logger = logging.getLogger(__name__)


class DenialReason(StrEnum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


class Decision(BaseModel):
    """Outcome of an ownership check."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    user_id: str
    resource: str
    resource_id: str
    reason: DenialReason | None = None

    @classmethod
    def allow(cls, user_id: str, resource: str, resource_id: str) -> Decision:
        return cls(allowed=True, user_id=user_id, resource=resource, resource_id=resource_id)

    @classmethod
    def deny(
        cls,
        reason: DenialReason,
        user_id: str,
        resource: str,
        resource_id: str,
    ) -> Decision:
        return cls(
            allowed=False,
            reason=reason,
            user_id=user_id,
            resource=resource,
            resource_id=resource_id,
        )

    def enforce(self) -> None:
        """Raise the exception matching a denial; no-op when allowed."""
        if self.allowed:
            return
        if self.reason == DenialReason.NOT_FOUND:
            raise NotFoundError(self.resource, self.resource_id)
        raise ForbiddenError(self.resource, self.resource_id, self.user_id)


class AuthorizationGate:
    """Decide whether a user owns a project or task.

    Example:
        ```python
        gate = AuthorizationGate(store)
        decision = await gate.authorize(user_id, task)
        decision.enforce()  # raises NotFoundError / ForbiddenError
        ```
    """

    def __init__(self, store: TrackerStore) -> None:
        self.store = store

    @staticmethod
    def check_project(acting_user_id: str, project: Project) -> Decision:
        if project.is_owned_by(acting_user_id):
            return Decision.allow(acting_user_id, "project", project.id)
        logger.warning(
            "Denied user %s access to project %s (owner=%s)",
            acting_user_id, project.id, project.user_id,
        )
        return Decision.deny(DenialReason.FORBIDDEN, acting_user_id, "project", project.id)

    async def check_task(self, acting_user_id: str, task: Task) -> Decision:
        try:
            parent = await self.store.get_project(task.project_id)
        except NotFoundError:
            logger.warning("Task %s references missing project %s", task.id, task.project_id)
            return Decision.deny(DenialReason.NOT_FOUND, acting_user_id, "task", task.id)

        if parent.is_owned_by(acting_user_id):
            return Decision.allow(acting_user_id, "task", task.id)
        logger.warning(
            "Denied user %s access to task %s (project=%s owner=%s)",
            acting_user_id, task.id, parent.id, parent.user_id,
        )
        return Decision.deny(DenialReason.FORBIDDEN, acting_user_id, "task", task.id)

    async def authorize(self, acting_user_id: str, resource: Project | Task) -> Decision:
        match resource:
            case Project():
                return self.check_project(acting_user_id, resource)
            case Task():
                return await self.check_task(acting_user_id, resource)
            case _:
                raise TypeError(f"Unsupported resource type: {type(resource).__name__}")


__all__ = ["AuthorizationGate", "Decision", "DenialReason"]
