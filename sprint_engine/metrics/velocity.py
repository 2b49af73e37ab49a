"""Velocity across recent completed sprints."""

from __future__ import annotations

from collections.abc import Iterable

from ..workflow.models import Sprint, SprintStatus
from .common import percentage, round_half_up
from .models import Velocity, VelocityPoint


def velocity_series(sprints: Iterable[Sprint], count: int) -> Velocity:
    """The last ``count`` completed sprints by end date, oldest first."""
    completed = sorted(
        (s for s in sprints if s.status is SprintStatus.COMPLETED),
        key=lambda s: s.end_date,
        reverse=True,
    )[: max(count, 0)]
    completed.reverse()

    points = [
        VelocityPoint(
            sprint_id=s.id,
            sprint_name=s.name,
            start_date=s.start_date,
            end_date=s.end_date,
            committed_points=s.committed_points,
            completed_points=s.completed_points,
            percentage_completed=percentage(s.completed_points, s.committed_points),
        )
        for s in completed
    ]
    if not points:
        return Velocity()
    average = round_half_up(sum(p.completed_points for p in points) / len(points))
    return Velocity(points=points, average_velocity=average)
