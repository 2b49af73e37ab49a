"""Burndown series generation."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

from ..workflow.models import Sprint, SprintStatus, Task, TaskStatus
from ..workflow.tasks import sum_points
from .common import round_one
from .models import Burndown, BurndownPoint


def burndown_series(sprint: Sprint, tasks: Iterable[Task]) -> Burndown:
    """One point per calendar day from start to end date inclusive.

    The baseline is the sprint's committed points (the current total while
    still planning). Day 0 shows the full baseline; every later day's
    ``completed`` counts done tasks whose ``completed_at`` falls on or before
    that day. The series depends only on the tasks' completion timestamps and
    can be regenerated at any time.
    """
    tasks = list(tasks)
    if sprint.status is SprintStatus.PLANNING:
        baseline = sum_points(tasks)
    else:
        baseline = sprint.committed_points
    total_days = sprint.total_days

    completions = sorted(
        (t.completed_at.date(), t.points)
        for t in tasks
        if t.status is TaskStatus.DONE and t.completed_at is not None
    )

    points = []
    done_so_far = 0
    cursor = 0
    for day in range(total_days + 1):
        current = sprint.start_date + timedelta(days=day)
        # day 0 is the starting line: nothing is burned down yet
        while day > 0 and cursor < len(completions) and completions[cursor][0] <= current:
            done_so_far += completions[cursor][1]
            cursor += 1
        ideal = baseline * (1 - day / total_days) if total_days > 0 else 0
        points.append(
            BurndownPoint(
                date=current,
                ideal=round_one(ideal),
                remaining=baseline - done_so_far,
                completed=done_so_far,
            )
        )

    return Burndown(
        sprint_id=sprint.id,
        sprint_name=sprint.name,
        start_date=sprint.start_date,
        end_date=sprint.end_date,
        total_points=baseline,
        points=points,
    )
