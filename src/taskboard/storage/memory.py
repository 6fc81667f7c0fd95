"""In-memory tracker storage for testing and development.

WARNING: This implementation stores data in memory only. All data is lost
when the process restarts. Use ONLY for testing and development.

Every method completes without awaiting, so each call is atomic with respect
to other coroutines on the same event loop.
"""

from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING, Any

from taskboard.core.exceptions import (
    LimitExceededError,
    NotFoundError,
    UserAlreadyExistsError,
)
from taskboard.storage.tracker_store import TrackerStore

if TYPE_CHECKING:
    from taskboard.core.types import Project, Task, User

logger = logging.getLogger(__name__)


class InMemoryTrackerStore(TrackerStore):
    """In-memory tracker storage.

    DO NOT USE IN PRODUCTION - all data is lost on restart!

    Example:
        ```python
        store = InMemoryTrackerStore()
        service = TrackerService(store, hasher=..., issuer=...)

        # Cleanup (for testing)
        store.clear()
        ```

    Attributes:
        _users: Dictionary mapping user ID to User
        _email_map: Dictionary mapping lower-cased email to user ID
        _projects: Dictionary mapping project ID to Project
        _tasks: Dictionary mapping task ID to Task
        _order: Insertion sequence per record, breaks created_at ties
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._email_map: dict[str, str] = {}
        self._projects: dict[str, Project] = {}
        self._tasks: dict[str, Task] = {}
        self._order: dict[str, int] = {}
        self._sequence = itertools.count()
        logger.info("Initialized in-memory tracker store")

    def _newest_first(self, records: list[Any]) -> list[Any]:
        return sorted(
            records,
            key=lambda r: (r.created_at, self._order.get(r.id, 0)),
            reverse=True,
        )

    #########
    # Users #
    #########

    async def create_user(self, user: User) -> User:
        email = user.email.lower()
        if email in self._email_map:
            raise UserAlreadyExistsError(email)
        if user.id in self._users:
            raise ValueError(f"User with ID {user.id} already exists")

        self._users[user.id] = user
        self._email_map[email] = user.id
        logger.info("Created user: %s", user.id)
        return user

    async def get_user(self, user_id: str) -> User:
        if user_id not in self._users:
            raise NotFoundError("user", user_id)
        return self._users[user_id]

    async def find_user_by_email(self, email: str) -> User | None:
        user_id = self._email_map.get(email.lower())
        return self._users.get(user_id) if user_id else None

    ############
    # Projects #
    ############

    async def insert_project(self, project: Project, *, limit: int | None = None) -> Project:
        if project.id in self._projects:
            raise ValueError(f"Project with ID {project.id} already exists")

        if limit is not None:
            owned = sum(1 for p in self._projects.values() if p.user_id == project.user_id)
            if owned >= limit:
                raise LimitExceededError(project.user_id, limit, {"owned": owned})

        self._projects[project.id] = project
        self._order[project.id] = next(self._sequence)
        logger.info("Created project: %s (owner=%s)", project.id, project.user_id)
        return project

    async def get_project(self, project_id: str) -> Project:
        if project_id not in self._projects:
            raise NotFoundError("project", project_id)
        return self._projects[project_id]

    async def list_projects(self, user_id: str) -> list[Project]:
        projects = [p for p in self._projects.values() if p.user_id == user_id]
        result = self._newest_first(projects)
        logger.debug("Listed %d projects for user %s", len(result), user_id)
        return result

    async def count_projects(self, user_id: str) -> int:
        return sum(1 for p in self._projects.values() if p.user_id == user_id)

    async def update_project(self, project: Project) -> Project:
        if project.id not in self._projects:
            raise NotFoundError("project", project.id)
        self._projects[project.id] = project
        logger.info("Updated project: %s", project.id)
        return project

    async def delete_project(self, project_id: str) -> int:
        if project_id not in self._projects:
            raise NotFoundError("project", project_id)

        # Children first so no task is ever left without its parent
        task_ids = [t.id for t in self._tasks.values() if t.project_id == project_id]
        for task_id in task_ids:
            del self._tasks[task_id]
            self._order.pop(task_id, None)
        del self._projects[project_id]
        self._order.pop(project_id, None)

        logger.info("Deleted project: %s (%d tasks)", project_id, len(task_ids))
        return len(task_ids)

    #########
    # Tasks #
    #########

    async def insert_task(self, task: Task) -> Task:
        if task.project_id not in self._projects:
            raise NotFoundError("project", task.project_id)
        if task.id in self._tasks:
            raise ValueError(f"Task with ID {task.id} already exists")

        self._tasks[task.id] = task
        self._order[task.id] = next(self._sequence)
        logger.info("Created task: %s (project=%s)", task.id, task.project_id)
        return task

    async def get_task(self, task_id: str) -> Task:
        if task_id not in self._tasks:
            raise NotFoundError("task", task_id)
        return self._tasks[task_id]

    async def list_tasks_by_project(self, project_id: str) -> list[Task]:
        tasks = [t for t in self._tasks.values() if t.project_id == project_id]
        return self._newest_first(tasks)

    async def list_tasks_by_owner(self, user_id: str) -> list[Task]:
        owned = {p.id for p in self._projects.values() if p.user_id == user_id}
        tasks = [t for t in self._tasks.values() if t.project_id in owned]
        result = self._newest_first(tasks)
        logger.debug("Listed %d tasks for user %s", len(result), user_id)
        return result

    async def count_tasks(self, project_id: str | None = None) -> int:
        if project_id is None:
            return len(self._tasks)
        return sum(1 for t in self._tasks.values() if t.project_id == project_id)

    async def update_task(self, task: Task) -> Task:
        if task.id not in self._tasks:
            raise NotFoundError("task", task.id)
        self._tasks[task.id] = task
        logger.info("Updated task: %s status=%s", task.id, task.status.value)
        return task

    async def delete_task(self, task_id: str) -> None:
        if task_id not in self._tasks:
            raise NotFoundError("task", task_id)
        del self._tasks[task_id]
        self._order.pop(task_id, None)
        logger.info("Deleted task: %s", task_id)

    def clear(self) -> None:
        """Clear all records (for testing)."""
        self._users.clear()
        self._email_map.clear()
        self._projects.clear()
        self._tasks.clear()
        self._order.clear()
        logger.info("Cleared all records from memory")

    def get_statistics(self) -> dict[str, Any]:
        """Record counts (for monitoring)."""
        return {
            "users": len(self._users),
            "projects": len(self._projects),
            "tasks": len(self._tasks),
        }


__all__ = ["InMemoryTrackerStore"]
