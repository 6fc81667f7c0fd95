"""Storage implementations for users, projects and tasks.

- SQLAlchemy: persistent storage on any async dialect
- In-Memory: testing and development

Example:
    ```python
    from taskboard.storage.sql import SQLAlchemyTrackerStore

    store = SQLAlchemyTrackerStore(
        database_url="postgresql+asyncpg://localhost/taskboard"
    )
    await store.initialize()

    # Development: In-Memory
    from taskboard.storage.memory import InMemoryTrackerStore

    store = InMemoryTrackerStore()
    ```
"""

from taskboard.storage.factory import StoreFactory
from taskboard.storage.memory import InMemoryTrackerStore
from taskboard.storage.sql import SQLAlchemyTrackerStore
from taskboard.storage.tracker_store import TrackerStore

__all__ = [
    "InMemoryTrackerStore",
    "SQLAlchemyTrackerStore",
    "StoreFactory",
    "TrackerStore",
]
