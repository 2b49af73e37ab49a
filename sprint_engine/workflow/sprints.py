"""Sprint state machine and point bookkeeping.

``committed_points`` is written once, when the sprint starts.
``completed_points`` is written only by :func:`recompute_completed_points`,
which is a pure sum over the current tasks and therefore safe to re-run.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .models import Sprint, SprintStatus, SprintTransition, Task
from .tasks import done_points, sum_points
from .transitions import validate_transition


def _transition(sprint: Sprint, to_status: SprintStatus, now: datetime) -> None:
    validate_transition(sprint.id, sprint.status, to_status)
    sprint.transitions.append(
        SprintTransition(
            from_status=sprint.status,
            to_status=to_status,
            timestamp=now,
        )
    )
    sprint.status = to_status
    sprint.updated_at = now


def start(sprint: Sprint, tasks_in_sprint: Iterable[Task], now: datetime) -> Sprint:
    """planning → active, snapshotting the committed points."""
    tasks = list(tasks_in_sprint)
    _transition(sprint, SprintStatus.ACTIVE, now)
    sprint.committed_points = sum_points(tasks)
    sprint.completed_points = done_points(tasks)
    return sprint


def recompute_completed_points(sprint: Sprint, tasks_in_sprint: Iterable[Task]) -> int:
    sprint.completed_points = done_points(tasks_in_sprint)
    return sprint.completed_points


def complete(sprint: Sprint, now: datetime) -> Sprint:
    """active → completed. Unfinished tasks are left where they are."""
    _transition(sprint, SprintStatus.COMPLETED, now)
    return sprint


def archive(sprint: Sprint, now: datetime) -> Sprint:
    _transition(sprint, SprintStatus.ARCHIVED, now)
    return sprint
