"""Pure board logic: column layout, grouping, drop-target resolution, WIP checks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from ..config import EngineConfig
from ..workflow.exceptions import ValidationError
from ..workflow.models import Task, TaskPriority, TaskStatus
from .models import BoardColumn, WipWarning

COLUMN_TITLES: dict[TaskStatus, str] = {
    TaskStatus.BACKLOG: "Backlog",
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.IN_REVIEW: "In Review",
    TaskStatus.IN_TESTING: "In Testing",
    TaskStatus.DONE: "Done",
}

PRIORITY_RANK: dict[TaskPriority, int] = {
    TaskPriority.CRITICAL: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


def default_columns(config: EngineConfig | None = None) -> list[BoardColumn]:
    """The six board columns, with WIP limits taken from ``config``."""
    limits = (config or EngineConfig()).wip_limits
    return [
        BoardColumn(status=status, title=title, wip_limit=limits.get(status.value))
        for status, title in COLUMN_TITLES.items()
    ]


def _created_key(task: Task) -> float:
    return task.created_at.timestamp() if task.created_at else 0.0


def group_by_column(
    tasks: Iterable[Task], columns: list[BoardColumn] | None = None
) -> dict[TaskStatus, list[Task]]:
    """Tasks per column, critical first, then newest first.

    Tasks whose status has no column (blocked, cancelled, archived) are left
    off the board.
    """
    columns = columns if columns is not None else default_columns()
    grouped: dict[TaskStatus, list[Task]] = {c.status: [] for c in columns}
    for task in tasks:
        if task.status in grouped:
            grouped[task.status].append(task)
    for column_tasks in grouped.values():
        column_tasks.sort(key=_created_key, reverse=True)
        column_tasks.sort(key=lambda t: PRIORITY_RANK[t.priority])
    return grouped


def parse_status(target: str) -> TaskStatus | None:
    try:
        return TaskStatus(target)
    except ValueError:
        return None


def resolve_status(target: str, tasks_by_id: Mapping[str, Task]) -> TaskStatus:
    """Resolve a drop target to a status.

    A status value wins; otherwise the target is taken as the id of the card
    it was dropped on and that card's status is used.
    """
    status = parse_status(target)
    if status is not None:
        return status
    other = tasks_by_id.get(target)
    if other is not None:
        return other.status
    raise ValidationError(f"Cannot resolve drop target: {target}", field="target")


def wip_warnings(
    tasks: Iterable[Task], columns: list[BoardColumn] | None = None
) -> list[WipWarning]:
    """Columns whose task count is above their WIP limit."""
    columns = columns if columns is not None else default_columns()
    grouped = group_by_column(tasks, columns)
    warnings = []
    for column in columns:
        count = len(grouped[column.status])
        if column.wip_limit is not None and count > column.wip_limit:
            warnings.append(
                WipWarning(status=column.status, count=count, limit=column.wip_limit)
            )
    return warnings
