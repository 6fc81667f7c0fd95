"""Factory for creating tracker store instances."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskboard.core.config import TaskboardConfig
from taskboard.core.exceptions import ConfigurationError
from taskboard.storage.tracker_store import TrackerStore

if TYPE_CHECKING:
    from collections.abc import Callable


class StoreFactory:
    """Factory for creating tracker store instances."""

    @staticmethod
    def create(config: TaskboardConfig) -> TrackerStore:
        """Create the store selected by ``config.storage_backend``."""
        from taskboard.storage.memory import InMemoryTrackerStore
        from taskboard.storage.sql import SQLAlchemyTrackerStore

        stores: dict[str, Callable[[], TrackerStore]] = {
            "memory": InMemoryTrackerStore,
            "sqlalchemy": lambda: SQLAlchemyTrackerStore(
                database_url=config.database_url,
                pool_size=config.database_pool_size,
                max_overflow=config.database_max_overflow,
                echo=config.database_echo,
            ),
        }

        store_factory = stores.get(config.storage_backend)
        if not store_factory:
            raise ConfigurationError(
                "storage_backend",
                f"unsupported backend {config.storage_backend!r}",
                {"supported": sorted(stores)},
            )

        return store_factory()


__all__ = ["StoreFactory"]
