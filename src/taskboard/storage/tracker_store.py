"""Abstract storage interface for users, projects and tasks.

The store is the only holder of mutable state.  It is passed explicitly to
:class:`~taskboard.service.TrackerService`; nothing in the package keeps a
process-wide instance.

Implementations must make each method atomic on its own.  Two methods cover
multi-record invariants and must be atomic as a whole:

* :meth:`TrackerStore.insert_project` - count-then-insert under the cap
* :meth:`TrackerStore.delete_project` - child tasks and parent project
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taskboard.core.types import Project, Task, User


class TrackerStore(ABC):
    """Abstract base class for tracker storage implementations.

    Implementations:
    - SQLAlchemyTrackerStore: Persistent storage (PostgreSQL, SQLite, MySQL)
    - InMemoryTrackerStore: Testing and development

    Example:
        ```python
        store = SQLAlchemyTrackerStore(database_url="sqlite+aiosqlite:///./tb.db")
        await store.initialize()

        user = await store.create_user(user)
        project = await store.insert_project(project, limit=4)
        removed = await store.delete_project(project.id)

        await store.close()
        ```
    """

    async def initialize(self) -> None:
        """Prepare the backend (create tables …).  Idempotent."""
        return None

    async def close(self) -> None:
        """Release backend resources."""
        return None

    #########
    # Users #
    #########

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """Insert a new user.

        Raises:
            UserAlreadyExistsError: If the email is already registered
        """

    @abstractmethod
    async def get_user(self, user_id: str) -> User:
        """Get user by id.

        Raises:
            NotFoundError: If the user does not exist
        """

    @abstractmethod
    async def find_user_by_email(self, email: str) -> User | None:
        """Return the user registered under *email*, or ``None``."""

    ############
    # Projects #
    ############

    @abstractmethod
    async def insert_project(self, project: Project, *, limit: int | None = None) -> Project:
        """Insert a project, enforcing the per-user cap atomically.

        Args:
            project: Project to insert
            limit: Maximum projects ``project.user_id`` may own afterwards;
                ``None`` disables the check

        Raises:
            LimitExceededError: If the owner already holds *limit* projects
        """

    @abstractmethod
    async def get_project(self, project_id: str) -> Project:
        """Get project by id.

        Raises:
            NotFoundError: If the project does not exist
        """

    @abstractmethod
    async def list_projects(self, user_id: str) -> list[Project]:
        """Projects owned by *user_id*, newest-created first."""

    @abstractmethod
    async def count_projects(self, user_id: str) -> int:
        """Number of projects owned by *user_id*."""

    @abstractmethod
    async def update_project(self, project: Project) -> Project:
        """Replace the stored project with *project*.

        Raises:
            NotFoundError: If the project does not exist
        """

    @abstractmethod
    async def delete_project(self, project_id: str) -> int:
        """Delete a project and every task under it.

        Returns:
            Number of tasks removed with the project

        Raises:
            NotFoundError: If the project does not exist
        """

    #########
    # Tasks #
    #########

    @abstractmethod
    async def insert_task(self, task: Task) -> Task:
        """Insert a task.

        Raises:
            NotFoundError: If ``task.project_id`` does not exist
        """

    @abstractmethod
    async def get_task(self, task_id: str) -> Task:
        """Get task by id.

        Raises:
            NotFoundError: If the task does not exist
        """

    @abstractmethod
    async def list_tasks_by_project(self, project_id: str) -> list[Task]:
        """Tasks under *project_id*, newest-created first."""

    @abstractmethod
    async def list_tasks_by_owner(self, user_id: str) -> list[Task]:
        """Tasks across every project owned by *user_id*, newest-created first."""

    @abstractmethod
    async def count_tasks(self, project_id: str | None = None) -> int:
        """Number of tasks, optionally restricted to one project."""

    @abstractmethod
    async def update_task(self, task: Task) -> Task:
        """Replace the stored task with *task*.

        Raises:
            NotFoundError: If the task does not exist
        """

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        """Delete a task.

        Raises:
            NotFoundError: If the task does not exist
        """


__all__ = ["TrackerStore"]
