"""InMemoryTrackerStore tests."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from taskboard.core.exceptions import LimitExceededError, NotFoundError, UserAlreadyExistsError
from taskboard.core.types import Project, Task, TaskStatus, User
from taskboard.storage.memory import InMemoryTrackerStore

T0 = datetime(2026, 1, 1, tzinfo=UTC)


def make_user(suffix: str = "a") -> User:
    return User(
        id=f"usr-{suffix}",
        email=f"{suffix}@example.com",
        name=f"User {suffix}",
        country="NL",
        password_hash="$2b$04$hash",
    )


def make_project(suffix: str = "1", owner: str = "usr-a", offset: int = 0) -> Project:
    ts = T0 + timedelta(seconds=offset)
    return Project(
        id=f"prj-{suffix}",
        title=f"Project {suffix}",
        description="Description",
        user_id=owner,
        created_at=ts,
        updated_at=ts,
    )


def make_task(suffix: str = "1", project: str = "prj-1", offset: int = 0) -> Task:
    ts = T0 + timedelta(seconds=offset)
    return Task(
        id=f"tsk-{suffix}",
        title=f"Task {suffix}",
        description="Description",
        project_id=project,
        created_at=ts,
        updated_at=ts,
    )


@pytest.fixture
def store() -> InMemoryTrackerStore:
    return InMemoryTrackerStore()


class TestUsers:

    @pytest.mark.asyncio
    async def test_create_and_get(self, store: InMemoryTrackerStore) -> None:
        user = make_user()
        await store.create_user(user)
        fetched = await store.get_user(user.id)
        assert fetched.email == user.email

    @pytest.mark.asyncio
    async def test_duplicate_email_raises(self, store: InMemoryTrackerStore) -> None:
        await store.create_user(make_user())
        clash = make_user().model_copy(update={"id": "usr-other"})
        with pytest.raises(UserAlreadyExistsError):
            await store.create_user(clash)

    @pytest.mark.asyncio
    async def test_duplicate_id_raises(self, store: InMemoryTrackerStore) -> None:
        await store.create_user(make_user())
        clash = make_user().model_copy(update={"email": "other@example.com"})
        with pytest.raises(ValueError):
            await store.create_user(clash)

    @pytest.mark.asyncio
    async def test_find_by_email_case_insensitive(self, store: InMemoryTrackerStore) -> None:
        await store.create_user(make_user())
        found = await store.find_user_by_email("A@Example.com")
        assert found is not None
        assert found.id == "usr-a"

    @pytest.mark.asyncio
    async def test_find_by_email_missing(self, store: InMemoryTrackerStore) -> None:
        assert await store.find_user_by_email("ghost@example.com") is None

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, store: InMemoryTrackerStore) -> None:
        with pytest.raises(NotFoundError):
            await store.get_user("usr-ghost")


class TestProjects:

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store: InMemoryTrackerStore) -> None:
        await store.insert_project(make_project())
        assert (await store.get_project("prj-1")).title == "Project 1"

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, store: InMemoryTrackerStore) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await store.get_project("prj-ghost")
        assert exc_info.value.resource == "project"

    @pytest.mark.asyncio
    async def test_limit_enforced(self, store: InMemoryTrackerStore) -> None:
        for i in range(4):
            await store.insert_project(make_project(str(i)), limit=4)
        with pytest.raises(LimitExceededError):
            await store.insert_project(make_project("5"), limit=4)
        assert await store.count_projects("usr-a") == 4

    @pytest.mark.asyncio
    async def test_limit_is_per_user(self, store: InMemoryTrackerStore) -> None:
        for i in range(4):
            await store.insert_project(make_project(str(i)), limit=4)
        await store.insert_project(make_project("b1", owner="usr-b"), limit=4)
        assert await store.count_projects("usr-b") == 1

    @pytest.mark.asyncio
    async def test_no_limit(self, store: InMemoryTrackerStore) -> None:
        for i in range(6):
            await store.insert_project(make_project(str(i)))
        assert await store.count_projects("usr-a") == 6

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store: InMemoryTrackerStore) -> None:
        await store.insert_project(make_project("old", offset=0))
        await store.insert_project(make_project("new", offset=10))
        await store.insert_project(make_project("other", owner="usr-b", offset=20))
        ids = [p.id for p in await store.list_projects("usr-a")]
        assert ids == ["prj-new", "prj-old"]

    @pytest.mark.asyncio
    async def test_list_ties_broken_by_insertion(self, store: InMemoryTrackerStore) -> None:
        await store.insert_project(make_project("first"))
        await store.insert_project(make_project("second"))
        ids = [p.id for p in await store.list_projects("usr-a")]
        assert ids == ["prj-second", "prj-first"]

    @pytest.mark.asyncio
    async def test_update(self, store: InMemoryTrackerStore) -> None:
        project = await store.insert_project(make_project())
        await store.update_project(project.model_copy(update={"title": "Renamed"}))
        assert (await store.get_project(project.id)).title == "Renamed"

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store: InMemoryTrackerStore) -> None:
        with pytest.raises(NotFoundError):
            await store.update_project(make_project("ghost"))


class TestCascadeDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_tasks(self, store: InMemoryTrackerStore) -> None:
        await store.insert_project(make_project("1"))
        await store.insert_project(make_project("2"))
        await store.insert_task(make_task("a", "prj-1"))
        await store.insert_task(make_task("b", "prj-1"))
        await store.insert_task(make_task("c", "prj-2"))

        removed = await store.delete_project("prj-1")

        assert removed == 2
        assert await store.count_tasks("prj-1") == 0
        assert await store.count_tasks() == 1
        with pytest.raises(NotFoundError):
            await store.get_project("prj-1")
        with pytest.raises(NotFoundError):
            await store.get_task("tsk-a")

    @pytest.mark.asyncio
    async def test_delete_frees_a_slot(self, store: InMemoryTrackerStore) -> None:
        for i in range(4):
            await store.insert_project(make_project(str(i)), limit=4)
        await store.delete_project("prj-0")
        await store.insert_project(make_project("4"), limit=4)
        assert await store.count_projects("usr-a") == 4

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, store: InMemoryTrackerStore) -> None:
        with pytest.raises(NotFoundError):
            await store.delete_project("prj-ghost")


class TestTasks:

    @pytest.fixture
    async def project(self, store: InMemoryTrackerStore) -> Project:
        return await store.insert_project(make_project())

    @pytest.mark.asyncio
    async def test_insert_requires_project(self, store: InMemoryTrackerStore) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await store.insert_task(make_task(project="prj-ghost"))
        assert exc_info.value.resource == "project"

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store: InMemoryTrackerStore, project: Project) -> None:
        await store.insert_task(make_task())
        task = await store.get_task("tsk-1")
        assert task.status == TaskStatus.TODO

    @pytest.mark.asyncio
    async def test_list_by_project_newest_first(
        self, store: InMemoryTrackerStore, project: Project
    ) -> None:
        await store.insert_task(make_task("old", offset=0))
        await store.insert_task(make_task("new", offset=5))
        ids = [t.id for t in await store.list_tasks_by_project(project.id)]
        assert ids == ["tsk-new", "tsk-old"]

    @pytest.mark.asyncio
    async def test_list_by_owner(self, store: InMemoryTrackerStore, project: Project) -> None:
        await store.insert_project(make_project("b", owner="usr-b"))
        await store.insert_task(make_task("mine", project.id, offset=1))
        await store.insert_task(make_task("theirs", "prj-b", offset=2))
        assert [t.id for t in await store.list_tasks_by_owner("usr-a")] == ["tsk-mine"]

    @pytest.mark.asyncio
    async def test_update(self, store: InMemoryTrackerStore, project: Project) -> None:
        task = await store.insert_task(make_task())
        done = task.model_copy(update={"status": TaskStatus.COMPLETED, "completed_at": T0})
        await store.update_task(done)
        assert (await store.get_task(task.id)).completed_at == T0

    @pytest.mark.asyncio
    async def test_delete(self, store: InMemoryTrackerStore, project: Project) -> None:
        await store.insert_task(make_task())
        await store.delete_task("tsk-1")
        with pytest.raises(NotFoundError):
            await store.get_task("tsk-1")

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, store: InMemoryTrackerStore) -> None:
        with pytest.raises(NotFoundError):
            await store.delete_task("tsk-ghost")


class TestHelpers:

    @pytest.mark.asyncio
    async def test_statistics_and_clear(self, store: InMemoryTrackerStore) -> None:
        await store.create_user(make_user())
        await store.insert_project(make_project())
        await store.insert_task(make_task())
        assert store.get_statistics() == {"users": 1, "projects": 1, "tasks": 1}
        store.clear()
        assert store.get_statistics() == {"users": 0, "projects": 0, "tasks": 0}
