"""Shared pytest fixtures for the taskboard test suite.

Design philosophy
-----------------
- Everything runs against :class:`InMemoryTrackerStore` or SQLite (in-memory,
  or a file under ``tmp_path``), so the suite needs no external services.
- bcrypt runs at its minimum cost factor (4 rounds) to keep hashing fast.
- The service gets a stepping clock: every call advances one second, which
  makes newest-first ordering and ``completed_at`` stamps deterministic.
- Scope is "function" everywhere for full isolation.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from taskboard.api.app import create_app
from taskboard.core.config import TaskboardConfig
from taskboard.core.types import AuthResult
from taskboard.service import TrackerService
from taskboard.storage.memory import InMemoryTrackerStore
from taskboard.utils.security import PasswordHasher, TokenIssuer

SECRET = "test-secret-key-that-is-at-least-32-chars"
SQLITE_URL = "sqlite+aiosqlite:///:memory:"
EPOCH = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class StepClock:
    """Deterministic clock: each call returns one second later than the last."""

    def __init__(self, start: datetime = EPOCH, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(secret=SECRET)


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_store() -> InMemoryTrackerStore:
    return InMemoryTrackerStore()


@pytest.fixture
async def sqlite_store():
    """SQLite-backed tracker store for integration tests."""
    from taskboard.storage.sql import SQLAlchemyTrackerStore

    store = SQLAlchemyTrackerStore(database_url=SQLITE_URL, pool_size=1)
    await store.initialize()
    yield store
    await store.close()


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def service(
    memory_store: InMemoryTrackerStore,
    hasher: PasswordHasher,
    issuer: TokenIssuer,
    clock: StepClock,
) -> TrackerService:
    return TrackerService(memory_store, hasher=hasher, issuer=issuer, clock=clock)


@pytest.fixture
async def alice(service: TrackerService) -> AuthResult:
    return await service.register_user(
        name="Alice", email="alice@example.com", password="secret123", country="NL"
    )


@pytest.fixture
async def bob(service: TrackerService) -> AuthResult:
    return await service.register_user(
        name="Bob", email="bob@example.com", password="hunter22", country="DE"
    )


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> TaskboardConfig:
    return TaskboardConfig(
        database_url=SQLITE_URL,
        storage_backend="memory",
        jwt_secret=SECRET,
        bcrypt_rounds=4,
    )


@pytest.fixture
async def client(config: TaskboardConfig):
    app = create_app(config, store=InMemoryTrackerStore())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

