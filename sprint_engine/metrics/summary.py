"""Sprint and project summaries."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date

from ..workflow.models import (
    Sprint,
    SprintStatus,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from ..workflow.tasks import done_points, sum_points
from ..workflow.validation import as_date
from .common import histogram, percentage, round_half_up, round_one
from .models import ProjectSummary, SprintSummary, TagCount

SECONDS_PER_DAY = 86400


def average_cycle_time(tasks: Iterable[Task]) -> float | None:
    """Mean days from first entering in_progress to done, one decimal.

    Only done tasks with both timestamps count; None when there are none.
    """
    durations = [
        (t.completed_at - t.started_at).total_seconds() / SECONDS_PER_DAY
        for t in tasks
        if t.status is TaskStatus.DONE and t.started_at and t.completed_at
    ]
    if not durations:
        return None
    return round_one(sum(durations) / len(durations))


def sprint_summary(sprint: Sprint, tasks: Iterable[Task], today: date) -> SprintSummary:
    """Derive the summary of ``sprint`` from its current tasks.

    A sprint still in planning has no commitment yet, so its current point
    total stands in for it and scope creep is zero.
    """
    tasks = list(tasks)
    today = as_date(today)
    current_total = sum_points(tasks)
    completed = done_points(tasks)

    if sprint.status is SprintStatus.PLANNING:
        committed = current_total
        scope_creep = 0
    else:
        committed = sprint.committed_points
        scope_creep = current_total - committed

    return SprintSummary(
        sprint_id=sprint.id,
        sprint_name=sprint.name,
        status=sprint.status.value,
        start_date=sprint.start_date,
        end_date=sprint.end_date,
        capacity=sprint.capacity,
        committed_points=committed,
        completed_points=completed,
        percentage_completed=percentage(completed, committed),
        days_remaining=max(0, (sprint.end_date - today).days),
        total_days=sprint.total_days,
        tasks_total=len(tasks),
        tasks_by_status=histogram(tasks, "status", TaskStatus),
        tasks_by_type=histogram(tasks, "type", TaskType),
        is_over_capacity=committed > sprint.capacity,
        scope_creep=scope_creep,
        average_cycle_time=average_cycle_time(tasks),
    )


def average_velocity(sprints: Iterable[Sprint]) -> int:
    """Mean completed points over completed sprints that finished any work."""
    completed = [
        s.completed_points
        for s in sprints
        if s.status is SprintStatus.COMPLETED and s.completed_points > 0
    ]
    if not completed:
        return 0
    return round_half_up(sum(completed) / len(completed))


def project_summary(
    project_id: str,
    tasks: Iterable[Task],
    sprints: Iterable[Sprint],
    top_tags: int = 5,
) -> ProjectSummary:
    tasks = list(tasks)
    sprints = list(sprints)
    bugs = sum(1 for t in tasks if t.type is TaskType.BUG)
    tag_counts = Counter(tag for t in tasks for tag in t.tag_ids)

    return ProjectSummary(
        project_id=project_id,
        total_tasks=len(tasks),
        total_story_points=sum_points(tasks),
        tasks_by_status=histogram(tasks, "status", TaskStatus),
        tasks_by_type=histogram(tasks, "type", TaskType),
        tasks_by_priority=histogram(tasks, "priority", TaskPriority),
        active_sprints=sum(1 for s in sprints if s.status is SprintStatus.ACTIVE),
        completed_sprints=sum(1 for s in sprints if s.status is SprintStatus.COMPLETED),
        average_velocity=average_velocity(sprints),
        bug_ratio=round_one(bugs / len(tasks) * 100) if tasks else 0.0,
        top_tags=[TagCount(tag_id=tag, count=n) for tag, n in tag_counts.most_common(top_tags)],
    )
