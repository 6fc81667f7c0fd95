"""TrackerService against SQLAlchemyTrackerStore: cap, concurrency, cascade.

Overrides the ``service`` fixture so ``alice`` and ``bob`` register through
a SQLite-backed store, once on a ``:memory:`` database and once on a file.
"""
from __future__ import annotations

import asyncio

import pytest

from taskboard.core.exceptions import LimitExceededError, NotFoundError
from taskboard.core.types import AuthResult, Project, Task, TaskPatch, TaskStatus
from taskboard.service import TrackerService
from taskboard.storage.sql import SQLAlchemyTrackerStore


@pytest.fixture(params=["memory", "file"])
async def sql_store(request, tmp_path):
    if request.param == "memory":
        url = "sqlite+aiosqlite:///:memory:"
    else:
        url = f"sqlite+aiosqlite:///{tmp_path / 'taskboard.db'}"
    store = SQLAlchemyTrackerStore(database_url=url)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def service(sql_store: SQLAlchemyTrackerStore, hasher, issuer, clock) -> TrackerService:
    return TrackerService(sql_store, hasher=hasher, issuer=issuer, clock=clock)


@pytest.fixture
async def project(service: TrackerService, alice: AuthResult) -> Project:
    return await service.create_project(alice.user.id, "Launch", "Ship v1")


class TestProjectCap:

    @pytest.mark.asyncio
    async def test_concurrent_creates_never_exceed_cap(
        self, service: TrackerService, alice: AuthResult
    ) -> None:
        results = await asyncio.gather(
            *(service.create_project(alice.user.id, f"P{i}", "D") for i in range(8)),
            return_exceptions=True,
        )
        created = [r for r in results if isinstance(r, Project)]
        assert len(created) == 4
        assert sum(isinstance(r, LimitExceededError) for r in results) == 4

        listed = await service.list_projects(alice.user.id)
        assert {p.id for p in listed} == {p.id for p in created}

    @pytest.mark.asyncio
    async def test_concurrent_creates_by_two_users(
        self, service: TrackerService, alice: AuthResult, bob: AuthResult
    ) -> None:
        await asyncio.gather(
            *(service.create_project(alice.user.id, f"A{i}", "D") for i in range(3)),
            *(service.create_project(bob.user.id, f"B{i}", "D") for i in range(3)),
        )
        assert len(await service.list_projects(alice.user.id)) == 3
        assert len(await service.list_projects(bob.user.id)) == 3


class TestConcurrentTasks:

    @pytest.mark.asyncio
    async def test_simultaneous_creates_all_listed(
        self, service: TrackerService, alice: AuthResult, project: Project
    ) -> None:
        created = await asyncio.gather(
            *(service.create_task(alice.user.id, project.id, f"T{i}", "D") for i in range(5))
        )
        listed = await service.list_tasks_by_project(alice.user.id, project.id)
        assert {t.id for t in listed} == {t.id for t in created}
        assert [t.id for t in await service.list_tasks(alice.user.id)] == [
            t.id for t in sorted(created, key=lambda t: t.created_at, reverse=True)
        ]

    @pytest.mark.asyncio
    async def test_concurrent_status_changes_persist(
        self, service: TrackerService, alice: AuthResult, project: Project
    ) -> None:
        tasks = [
            await service.create_task(alice.user.id, project.id, f"T{i}", "D") for i in range(3)
        ]
        await asyncio.gather(
            *(service.update_task(alice.user.id, t.id, TaskPatch(status=TaskStatus.COMPLETED))
              for t in tasks)
        )
        for t in tasks:
            stored = await service.get_task(alice.user.id, t.id)
            assert stored.status == TaskStatus.COMPLETED
            assert stored.completed_at is not None


class TestCascadeDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_tasks(
        self, service: TrackerService, alice: AuthResult, project: Project
    ) -> None:
        other = await service.create_project(alice.user.id, "Other", "D")
        await service.create_task(alice.user.id, project.id, "T1", "D")
        await service.create_task(alice.user.id, project.id, "T2", "D")
        keep = await service.create_task(alice.user.id, other.id, "Keep", "D")

        assert await service.delete_project(alice.user.id, project.id) == 2
        assert [t.id for t in await service.list_tasks(alice.user.id)] == [keep.id]
        with pytest.raises(NotFoundError):
            await service.get_project(alice.user.id, project.id)

    @pytest.mark.asyncio
    async def test_delete_racing_task_creates(
        self,
        service: TrackerService,
        alice: AuthResult,
        project: Project,
        sql_store: SQLAlchemyTrackerStore,
    ) -> None:
        results = await asyncio.gather(
            service.create_task(alice.user.id, project.id, "Before", "D"),
            service.delete_project(alice.user.id, project.id),
            service.create_task(alice.user.id, project.id, "After", "D"),
            return_exceptions=True,
        )
        assert all(isinstance(r, (Task, int, NotFoundError)) for r in results)
        assert await sql_store.count_tasks(project.id) == 0
        assert await service.list_tasks(alice.user.id) == []
