"""Task state machine.

Status is a workflow position, not a strict DAG: any status may follow any
other. The only rules are the side effects on the timestamps.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .models import Task, TaskStatus


def apply_status(task: Task, new_status: TaskStatus, now: datetime) -> bool:
    """Move ``task`` to ``new_status``. Returns False when nothing changed.

    Entering ``done`` stamps ``completed_at``; leaving it clears the stamp, so
    ``completed_at is not None`` holds exactly when the task is done. The
    first entry into ``in_progress`` stamps ``started_at``.
    """
    if task.status is new_status:
        return False

    task.status = new_status
    if new_status is TaskStatus.DONE:
        task.completed_at = now
    else:
        task.completed_at = None
    if new_status is TaskStatus.IN_PROGRESS and task.started_at is None:
        task.started_at = now
    task.updated_at = now
    return True


def sum_points(tasks: Iterable[Task]) -> int:
    """Total story points, unestimated tasks counting zero."""
    return sum(t.points for t in tasks)


def done_points(tasks: Iterable[Task]) -> int:
    return sum(t.points for t in tasks if t.status is TaskStatus.DONE)


def is_finished(task: Task) -> bool:
    return task.status is TaskStatus.DONE
