"""Task status transitions.

There is no forbidden edge between statuses.  The only governed rule is the
``completed_at`` bookkeeping:

* entering ``COMPLETED`` stamps ``completed_at``;
* leaving ``COMPLETED`` clears it;
* re-applying the current status (or no status at all) changes nothing.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from taskboard.core.types import TaskStatus

if TYPE_CHECKING:
    from datetime import datetime

    from taskboard.core.types import Task


def apply_status(task: Task, status: TaskStatus | None, now: datetime) -> Task:
    """Return *task* moved to *status*, keeping ``completed_at`` consistent."""
    if status is None or status == task.status:
        return task

    completed_at: datetime | None
    match status:
        case TaskStatus.COMPLETED:
            completed_at = now
        case TaskStatus.TODO | TaskStatus.IN_PROGRESS | TaskStatus.REVIEW:
            completed_at = None
        case _:
            assert_never(status)

    return task.model_copy(update={"status": status, "completed_at": completed_at})


__all__ = ["apply_status"]
