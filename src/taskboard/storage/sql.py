"""SQLAlchemy-backed tracker storage - multi-database compatible.

Works with any async SQLAlchemy dialect:
- PostgreSQL + asyncpg (production)
- SQLite + aiosqlite (development / CI)
- MySQL + aiomysql (alternative production)

The ORM models use SQLAlchemy 2.0 ``Mapped[T]`` syntax and only portable
column types.  One ``AsyncSession`` is opened per store call; the capped
insert and the cascading delete each run inside a single transaction.

SQLite admits one writer at a time, so on SQLite every write is serialised
through an ``asyncio.Lock``.  A private ``:memory:`` database lives on a single
shared connection; there reads take the same lock, since closing one session
resets the transaction of any other session on that connection.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager, nullcontext
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from taskboard.core.exceptions import (
    LimitExceededError,
    NotFoundError,
    StoreError,
    TaskboardError,
    UserAlreadyExistsError,
)
from taskboard.core.types import Project, Task, TaskStatus, User
from taskboard.storage.tracker_store import TrackerStore
from taskboard.utils.db_compat import detect_dialect, requires_static_pool, serializes_writes

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back; every stored timestamp is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def to_domain(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            country=self.country,
            password_hash=self.password_hash,
            created_at=_aware(self.created_at),
        )


class ProjectModel(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Insertion order; breaks created_at ties in listings
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_domain(self) -> Project:
        return Project(
            id=self.id,
            title=self.title,
            description=self.description,
            user_id=self.user_id,
            created_at=_aware(self.created_at),
            updated_at=_aware(self.updated_at),
        )


class TaskModel(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.TODO.value, index=True
    )
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            title=self.title,
            description=self.description,
            status=TaskStatus(self.status),
            project_id=self.project_id,
            created_at=_aware(self.created_at),
            updated_at=_aware(self.updated_at),
            completed_at=_aware(self.completed_at),
        )


class SQLAlchemyTrackerStore(TrackerStore):
    """SQLAlchemy async tracker store - works with PostgreSQL, SQLite, MySQL.

    Example (SQLite for testing)
    ----------------------------
    .. code-block:: python

        store = SQLAlchemyTrackerStore(database_url="sqlite+aiosqlite:///:memory:")
        await store.initialize()
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ) -> None:
        dialect = detect_dialect(database_url)
        shared_connection = requires_static_pool(database_url)
        kw: dict[str, Any] = {"echo": echo}

        if shared_connection:
            kw["poolclass"] = StaticPool
            kw["connect_args"] = {"check_same_thread": False}
        else:
            kw["pool_size"] = pool_size
            kw["max_overflow"] = max_overflow
            kw["pool_pre_ping"] = pool_pre_ping
            kw["pool_recycle"] = 3600

        self.engine: AsyncEngine = create_async_engine(database_url, **kw)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            autocommit=False,
        )
        self._lock: asyncio.Lock | None = asyncio.Lock() if serializes_writes(dialect) else None
        self._lock_reads = shared_connection
        logger.info(
            "SQLAlchemyTrackerStore dialect=%s pool=%s serialised_writes=%s",
            dialect.value,
            "static" if shared_connection else pool_size,
            self._lock is not None,
        )

    def _guard(self, *, write: bool = True) -> AbstractAsyncContextManager[Any]:
        if self._lock is not None and (write or self._lock_reads):
            return self._lock
        return nullcontext()

    async def initialize(self) -> None:
        """Create tables if they do not exist (idempotent)."""
        async with self._guard(), self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Tracker tables ready")

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("SQLAlchemyTrackerStore closed")

    #########
    # Users #
    #########

    async def create_user(self, user: User) -> User:
        async with self._guard(), self.session_factory() as session:
            model = UserModel(
                id=user.id,
                email=user.email.lower(),
                name=user.name,
                country=user.country,
                password_hash=user.password_hash,
                created_at=user.created_at,
            )
            session.add(model)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise UserAlreadyExistsError(user.email)  # noqa: B904
            except Exception as exc:
                await session.rollback()
                raise StoreError("create_user", str(exc)) from exc
            logger.info("Created user id=%s", user.id)
            return model.to_domain()

    async def get_user(self, user_id: str) -> User:
        async with self._guard(write=False), self.session_factory() as session:
            model = await session.get(UserModel, user_id)
            if model is None:
                raise NotFoundError("user", user_id)
            return model.to_domain()

    async def find_user_by_email(self, email: str) -> User | None:
        async with self._guard(write=False), self.session_factory() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.email == email.lower())
            )
            model = result.scalar_one_or_none()
            return model.to_domain() if model is not None else None

    ############
    # Projects #
    ############

    async def insert_project(self, project: Project, *, limit: int | None = None) -> Project:
        async with self._guard(), self.session_factory() as session:
            try:
                async with session.begin():
                    if limit is not None:
                        # Row lock on the owner serialises capped inserts for
                        # one user; SQLite has no FOR UPDATE and relies on _guard
                        await session.execute(
                            select(UserModel.id)
                            .where(UserModel.id == project.user_id)
                            .with_for_update()
                        )
                        owned = (await session.execute(
                            select(func.count(ProjectModel.id))
                            .where(ProjectModel.user_id == project.user_id)
                        )).scalar() or 0
                        if owned >= limit:
                            raise LimitExceededError(project.user_id, limit, {"owned": owned})
                    seq = (await session.execute(
                        select(func.coalesce(func.max(ProjectModel.seq), 0))
                    )).scalar() or 0
                    session.add(ProjectModel(
                        id=project.id,
                        title=project.title,
                        description=project.description,
                        user_id=project.user_id,
                        created_at=project.created_at,
                        updated_at=project.updated_at,
                        seq=seq + 1,
                    ))
            except TaskboardError:
                raise
            except Exception as exc:
                raise StoreError("insert_project", str(exc)) from exc
            logger.info("Created project id=%s owner=%s", project.id, project.user_id)
            return project

    async def get_project(self, project_id: str) -> Project:
        async with self._guard(write=False), self.session_factory() as session:
            model = await session.get(ProjectModel, project_id)
            if model is None:
                raise NotFoundError("project", project_id)
            return model.to_domain()

    async def list_projects(self, user_id: str) -> list[Project]:
        async with self._guard(write=False), self.session_factory() as session:
            result = await session.execute(
                select(ProjectModel)
                .where(ProjectModel.user_id == user_id)
                .order_by(ProjectModel.created_at.desc(), ProjectModel.seq.desc())
            )
            return [m.to_domain() for m in result.scalars().all()]

    async def count_projects(self, user_id: str) -> int:
        async with self._guard(write=False), self.session_factory() as session:
            result = await session.execute(
                select(func.count(ProjectModel.id)).where(ProjectModel.user_id == user_id)
            )
            return result.scalar() or 0

    async def update_project(self, project: Project) -> Project:
        async with self._guard(), self.session_factory() as session:
            try:
                model = await session.get(ProjectModel, project.id)
                if model is None:
                    raise NotFoundError("project", project.id)
                model.title = project.title
                model.description = project.description
                model.updated_at = project.updated_at
                await session.commit()
                return model.to_domain()
            except NotFoundError:
                raise
            except Exception as exc:
                await session.rollback()
                raise StoreError("update_project", str(exc)) from exc

    async def delete_project(self, project_id: str) -> int:
        async with self._guard(), self.session_factory() as session:
            try:
                async with session.begin():
                    model = await session.get(ProjectModel, project_id, with_for_update=True)
                    if model is None:
                        raise NotFoundError("project", project_id)
                    # Children first; SQLite does not enforce ON DELETE CASCADE by default
                    result = await session.execute(
                        delete(TaskModel).where(TaskModel.project_id == project_id)
                    )
                    await session.delete(model)
            except NotFoundError:
                raise
            except Exception as exc:
                raise StoreError("delete_project", str(exc)) from exc
            removed = result.rowcount or 0
            logger.info("Deleted project id=%s tasks=%d", project_id, removed)
            return removed

    #########
    # Tasks #
    #########

    async def insert_task(self, task: Task) -> Task:
        async with self._guard(), self.session_factory() as session:
            try:
                async with session.begin():
                    # Locking the parent keeps a concurrent delete_project from
                    # orphaning the new row
                    parent = await session.get(ProjectModel, task.project_id, with_for_update=True)
                    if parent is None:
                        raise NotFoundError("project", task.project_id)
                    seq = (await session.execute(
                        select(func.coalesce(func.max(TaskModel.seq), 0))
                    )).scalar() or 0
                    session.add(TaskModel(
                        id=task.id,
                        title=task.title,
                        description=task.description,
                        status=task.status.value,
                        project_id=task.project_id,
                        created_at=task.created_at,
                        updated_at=task.updated_at,
                        completed_at=task.completed_at,
                        seq=seq + 1,
                    ))
            except NotFoundError:
                raise
            except Exception as exc:
                raise StoreError("insert_task", str(exc)) from exc
            logger.info("Created task id=%s project=%s", task.id, task.project_id)
            return task

    async def get_task(self, task_id: str) -> Task:
        async with self._guard(write=False), self.session_factory() as session:
            model = await session.get(TaskModel, task_id)
            if model is None:
                raise NotFoundError("task", task_id)
            return model.to_domain()

    async def list_tasks_by_project(self, project_id: str) -> list[Task]:
        async with self._guard(write=False), self.session_factory() as session:
            result = await session.execute(
                select(TaskModel)
                .where(TaskModel.project_id == project_id)
                .order_by(TaskModel.created_at.desc(), TaskModel.seq.desc())
            )
            return [m.to_domain() for m in result.scalars().all()]

    async def list_tasks_by_owner(self, user_id: str) -> list[Task]:
        async with self._guard(write=False), self.session_factory() as session:
            result = await session.execute(
                select(TaskModel)
                .join(ProjectModel, TaskModel.project_id == ProjectModel.id)
                .where(ProjectModel.user_id == user_id)
                .order_by(TaskModel.created_at.desc(), TaskModel.seq.desc())
            )
            return [m.to_domain() for m in result.scalars().all()]

    async def count_tasks(self, project_id: str | None = None) -> int:
        async with self._guard(write=False), self.session_factory() as session:
            query = select(func.count(TaskModel.id))
            if project_id is not None:
                query = query.where(TaskModel.project_id == project_id)
            result = await session.execute(query)
            return result.scalar() or 0

    async def update_task(self, task: Task) -> Task:
        async with self._guard(), self.session_factory() as session:
            try:
                model = await session.get(TaskModel, task.id)
                if model is None:
                    raise NotFoundError("task", task.id)
                model.title = task.title
                model.description = task.description
                model.status = task.status.value
                model.updated_at = task.updated_at
                model.completed_at = task.completed_at
                await session.commit()
                return model.to_domain()
            except NotFoundError:
                raise
            except Exception as exc:
                await session.rollback()
                raise StoreError("update_task", str(exc)) from exc

    async def delete_task(self, task_id: str) -> None:
        async with self._guard(), self.session_factory() as session:
            try:
                model = await session.get(TaskModel, task_id)
                if model is None:
                    raise NotFoundError("task", task_id)
                await session.delete(model)
                await session.commit()
            except NotFoundError:
                raise
            except Exception as exc:
                await session.rollback()
                raise StoreError("delete_task", str(exc)) from exc
            logger.info("Deleted task id=%s", task_id)


__all__ = ["Base", "ProjectModel", "SQLAlchemyTrackerStore", "TaskModel", "UserModel"]
