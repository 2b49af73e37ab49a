from .burndown import burndown_series
from .health import classify_health, expected_progress
from .models import (
    Burndown,
    BurndownPoint,
    HealthStatus,
    ProjectSummary,
    SprintHealth,
    SprintSummary,
    Velocity,
    VelocityPoint,
    WorkloadEntry,
)
from .summary import average_cycle_time, project_summary, sprint_summary
from .velocity import velocity_series
from .workload import team_workload

__all__ = [
    "sprint_summary",
    "project_summary",
    "average_cycle_time",
    "classify_health",
    "expected_progress",
    "burndown_series",
    "velocity_series",
    "team_workload",
    "SprintSummary",
    "SprintHealth",
    "HealthStatus",
    "Burndown",
    "BurndownPoint",
    "Velocity",
    "VelocityPoint",
    "WorkloadEntry",
    "ProjectSummary",
]
