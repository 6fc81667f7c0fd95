"""taskboard - personal project and task tracker.

Quick start
-----------
.. code-block:: python

    from taskboard import TaskboardConfig, create_app

    config = TaskboardConfig(
        database_url="sqlite+aiosqlite:///./taskboard.db",
        jwt_secret="change-me-to-a-secret-of-32-characters",
    )
    app = create_app(config)

Public API
----------
Core types
    User, UserProfile, AuthResult, Project, Task, TaskStatus,
    ProjectPatch, TaskPatch

Configuration
    TaskboardConfig

Service & authorization
    TrackerService, AuthorizationGate, Decision, DenialReason

Storage backends
    TrackerStore (ABC), InMemoryTrackerStore, SQLAlchemyTrackerStore

HTTP
    create_app

Exceptions
    TaskboardError and all its subclasses
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

try:
    __version__: str = _pkg_version("taskboard")
except PackageNotFoundError:  # running from source without install
    __version__ = "0.0.0+dev"

__license__ = "MIT"

# Configuration
from taskboard.core.config import TaskboardConfig

# Exceptions
from taskboard.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ForbiddenError,
    InvalidInputError,
    LimitExceededError,
    NotFoundError,
    StoreError,
    TaskboardError,
    UserAlreadyExistsError,
)
from taskboard.core.types import (
    AuthResult,
    Project,
    ProjectPatch,
    Task,
    TaskPatch,
    TaskStatus,
    User,
    UserProfile,
)

# Service
from taskboard.authorization import AuthorizationGate, Decision, DenialReason
from taskboard.service import TrackerService

# Storage
from taskboard.storage.memory import InMemoryTrackerStore
from taskboard.storage.sql import SQLAlchemyTrackerStore
from taskboard.storage.tracker_store import TrackerStore

# HTTP
from taskboard.api.app import create_app

__all__ = [  # noqa: RUF022
    "__version__",
    # Types
    "User",
    "UserProfile",
    "AuthResult",
    "Project",
    "ProjectPatch",
    "Task",
    "TaskPatch",
    "TaskStatus",
    # Config
    "TaskboardConfig",
    # Service
    "TrackerService",
    "AuthorizationGate",
    "Decision",
    "DenialReason",
    # Exceptions
    "TaskboardError",
    "InvalidInputError",
    "UserAlreadyExistsError",
    "NotFoundError",
    "ForbiddenError",
    "LimitExceededError",
    "AuthenticationError",
    "StoreError",
    "ConfigurationError",
    # Storage
    "TrackerStore",
    "InMemoryTrackerStore",
    "SQLAlchemyTrackerStore",
    # HTTP
    "create_app",
]
