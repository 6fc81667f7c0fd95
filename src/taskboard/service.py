"""Tracker service - every user, project and task operation.

Design decisions
----------------
* The service holds an explicit :class:`~taskboard.storage.tracker_store.TrackerStore`
  handle.  There is no module-level store; tests build a fresh
  :class:`~taskboard.storage.memory.InMemoryTrackerStore` per case.

* **Gate first** - every read or mutation of an existing project or task is
  checked by :class:`~taskboard.authorization.AuthorizationGate` before the
  store is touched.  Creating a task checks the target project instead.

* **Partial updates** - patches carry presence per field.  A field that is
  absent, ``None`` or blank leaves the stored value as it is.  A patch that
  changes nothing performs no write, so re-applying it is a no-op.

* **Clock injection** - ``clock`` supplies every timestamp the service
  stamps (``created_at``, ``updated_at``, ``completed_at``), which keeps
  ordering and completion tests deterministic.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from taskboard.authorization import AuthorizationGate
from taskboard.core.exceptions import AuthenticationError, InvalidInputError, NotFoundError
from taskboard.core.lifecycle import apply_status
from taskboard.core.types import (
    AuthResult,
    Project,
    ProjectPatch,
    Task,
    TaskPatch,
    TaskStatus,
    User,
    UserProfile,
    utcnow,
)
from taskboard.utils.security import PasswordHasher, TokenIssuer, generate_id
from taskboard.utils.validation import (
    check_password,
    normalize_email,
    require_text,
    validate_email,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from taskboard.core.config import TaskboardConfig
    from taskboard.storage.tracker_store import TrackerStore

logger = logging.getLogger(__name__)


class TrackerService:
    """Entry point for the identity, project and task operations.

    Parameters
    ----------
    store:
        Backing store, shared by reference.
    hasher:
        Password hasher used at registration and login.
    issuer:
        Bearer-token issuer used at registration, login and authentication.
    max_projects_per_user:
        Cap enforced by :meth:`create_project`.
    min_password_length:
        Shortest password accepted by :meth:`register_user`.
    clock:
        Returns the current UTC time.
    """

    def __init__(
        self,
        store: TrackerStore,
        *,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        max_projects_per_user: int = 4,
        min_password_length: int = 6,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.gate = AuthorizationGate(store)
        self.max_projects_per_user = max_projects_per_user
        self.min_password_length = min_password_length
        self._clock = clock

    @classmethod
    def from_config(cls, config: TaskboardConfig, store: TrackerStore) -> TrackerService:
        return cls(
            store,
            hasher=PasswordHasher(rounds=config.bcrypt_rounds),
            issuer=TokenIssuer(
                secret=config.jwt_secret,
                algorithm=config.jwt_algorithm,
                ttl=config.token_ttl,
            ),
            max_projects_per_user=config.max_projects_per_user,
            min_password_length=config.min_password_length,
        )

    ############
    # Identity #
    ############

    async def register_user(
        self,
        name: str,
        email: str,
        password: str,
        country: str,
    ) -> AuthResult:
        """Create an account and return it with a fresh token.

        Raises:
            InvalidInputError: On a blank name/country, malformed email or
                unacceptable password
            UserAlreadyExistsError: If the email is already registered
        """
        name = require_text(name, "name")
        country = require_text(country, "country")
        email = normalize_email(email or "")
        if not validate_email(email):
            raise InvalidInputError("email", "Please include a valid email")
        check_password(password, self.min_password_length)

        user = User(
            id=generate_id("usr"),
            email=email,
            name=name,
            country=country,
            password_hash=self.hasher.hash(password),
            created_at=self._clock(),
        )
        user = await self.store.create_user(user)
        logger.info("Registered user %s", user.id)
        return AuthResult(user=user.to_profile(), token=self.issuer.issue(user.id))

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and return the user with a fresh token.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        user = await self.store.find_user_by_email(normalize_email(email or ""))
        if user is None or not self.hasher.verify(password or "", user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthenticationError("Invalid email or password")
        logger.info("User %s logged in", user.id)
        return AuthResult(user=user.to_profile(), token=self.issuer.issue(user.id))

    async def get_profile(self, user_id: str) -> UserProfile:
        user = await self.store.get_user(user_id)
        return user.to_profile()

    async def authenticate(self, token: str) -> str:
        """Resolve a bearer token to the id of an existing user.

        Raises:
            AuthenticationError: If the token is invalid or its user is gone
        """
        user_id = self.issuer.resolve(token)
        try:
            await self.store.get_user(user_id)
        except NotFoundError as exc:
            logger.warning("Token for unknown user %s", user_id)
            raise AuthenticationError("Not authorized, user not found") from exc
        return user_id

    ############
    # Projects #
    ############

    async def _owned_project(self, user_id: str, project_id: str) -> Project:
        project = await self.store.get_project(project_id)
        self.gate.check_project(user_id, project).enforce()
        return project

    async def create_project(self, user_id: str, title: str, description: str) -> Project:
        """Create a project for *user_id*.

        Raises:
            InvalidInputError: If title or description is blank
            LimitExceededError: If the user already owns the maximum
        """
        now = self._clock()
        project = Project(
            id=generate_id("prj"),
            title=require_text(title, "title"),
            description=require_text(description, "description"),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        return await self.store.insert_project(project, limit=self.max_projects_per_user)

    async def get_project(self, user_id: str, project_id: str) -> Project:
        return await self._owned_project(user_id, project_id)

    async def update_project(
        self,
        user_id: str,
        project_id: str,
        patch: ProjectPatch,
    ) -> Project:
        project = await self._owned_project(user_id, project_id)
        changes: dict[str, Any] = {
            name: value
            for name, value in patch.provided().items()
            if getattr(project, name) != value
        }
        if not changes:
            logger.debug("Project %s patch changed nothing", project_id)
            return project

        changes["updated_at"] = self._clock()
        return await self.store.update_project(project.model_copy(update=changes))

    async def delete_project(self, user_id: str, project_id: str) -> int:
        """Delete a project and its tasks; return the number of tasks removed."""
        await self._owned_project(user_id, project_id)
        removed = await self.store.delete_project(project_id)
        logger.info("User %s deleted project %s (%d tasks)", user_id, project_id, removed)
        return removed

    async def list_projects(self, user_id: str) -> list[Project]:
        return await self.store.list_projects(user_id)

    #########
    # Tasks #
    #########

    async def _owned_task(self, user_id: str, task_id: str) -> Task:
        task = await self.store.get_task(task_id)
        (await self.gate.check_task(user_id, task)).enforce()
        return task

    async def create_task(
        self,
        user_id: str,
        project_id: str,
        title: str,
        description: str,
    ) -> Task:
        """Create a ``TODO`` task under a project the user owns."""
        title = require_text(title, "title")
        description = require_text(description, "description")
        await self._owned_project(user_id, project_id)

        now = self._clock()
        task = Task(
            id=generate_id("tsk"),
            title=title,
            description=description,
            status=TaskStatus.TODO,
            project_id=project_id,
            created_at=now,
            updated_at=now,
            completed_at=None,
        )
        return await self.store.insert_task(task)

    async def get_task(self, user_id: str, task_id: str) -> Task:
        return await self._owned_task(user_id, task_id)

    async def update_task(self, user_id: str, task_id: str, patch: TaskPatch) -> Task:
        """Apply a partial update; a status change maintains ``completed_at``."""
        task = await self._owned_task(user_id, task_id)
        now = self._clock()

        fields = patch.provided()
        status = fields.pop("status", None)
        changes = {name: value for name, value in fields.items() if getattr(task, name) != value}

        updated = apply_status(task.model_copy(update=changes), status, now)
        if updated == task:
            logger.debug("Task %s patch changed nothing", task_id)
            return task

        updated = updated.model_copy(update={"updated_at": now})
        return await self.store.update_task(updated)

    async def delete_task(self, user_id: str, task_id: str) -> None:
        await self._owned_task(user_id, task_id)
        await self.store.delete_task(task_id)

    async def list_tasks(self, user_id: str) -> list[Task]:
        return await self.store.list_tasks_by_owner(user_id)

    async def list_tasks_by_project(self, user_id: str, project_id: str) -> list[Task]:
        await self._owned_project(user_id, project_id)
        return await self.store.list_tasks_by_project(project_id)

    ##########
    # Health #
    ##########

    async def health_check(self) -> dict[str, Any]:
        """Return health information for the backing store."""
        health: dict[str, Any] = {"status": "ok", "components": {}}
        try:
            task_count = await self.store.count_tasks()
            health["components"]["store"] = {"status": "ok", "task_count": task_count}
        except Exception as exc:
            logger.error("Store health check failed: %s", exc, exc_info=True)
            health["status"] = "unhealthy"
            health["components"]["store"] = {"status": "unhealthy"}
        return health


__all__ = ["TrackerService"]
