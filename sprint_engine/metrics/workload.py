"""Team workload grouped by assignee."""

from __future__ import annotations

from collections.abc import Iterable

from ..workflow.models import Task, TaskStatus
from .common import histogram
from .models import WorkloadEntry


def team_workload(tasks: Iterable[Task], top_n: int = 10) -> list[WorkloadEntry]:
    """Per-assignee task counts, busiest first, capped at ``top_n``.

    A task with several assignees counts once for each of them; unassigned
    tasks are left out.
    """
    by_user: dict[str, list[Task]] = {}
    for task in tasks:
        for user_id in task.assignee_ids:
            by_user.setdefault(user_id, []).append(task)

    entries = [
        WorkloadEntry(
            user_id=user_id,
            total_tasks=len(user_tasks),
            total_story_points=sum(t.points for t in user_tasks),
            tasks_by_status=histogram(user_tasks, "status", TaskStatus),
        )
        for user_id, user_tasks in by_user.items()
    ]
    entries.sort(key=lambda e: e.total_tasks, reverse=True)
    return entries[:top_n]
