"""Core taskboard components: types, exceptions, configuration, lifecycle."""

from taskboard.core.config import TaskboardConfig
from taskboard.core.exceptions import *  # noqa: F403
from taskboard.core.exceptions import __all__ as exceptions__all__
from taskboard.core.lifecycle import apply_status
from taskboard.core.types import *  # noqa: F403
from taskboard.core.types import __all__ as types__all__

__all__ = [
    "TaskboardConfig",
    "apply_status",
]

__all__ += exceptions__all__
__all__ += types__all__
