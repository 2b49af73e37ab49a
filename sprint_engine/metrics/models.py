"""Result types for the metrics engine. Computed on read, never persisted."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class HealthStatus(Enum):
    ON_TRACK = "on-track"
    AT_RISK = "at-risk"
    BEHIND = "behind"


@dataclass
class SprintSummary:
    sprint_id: str
    sprint_name: str
    status: str
    start_date: date
    end_date: date
    capacity: int
    committed_points: int
    completed_points: int
    percentage_completed: int
    days_remaining: int
    total_days: int
    tasks_total: int
    tasks_by_status: dict[str, int] = field(default_factory=dict)
    tasks_by_type: dict[str, int] = field(default_factory=dict)
    is_over_capacity: bool = False
    scope_creep: int = 0
    average_cycle_time: float | None = None


@dataclass
class SprintHealth:
    status: HealthStatus
    reason: str
    expected_progress: float
    deviation: float


@dataclass
class BurndownPoint:
    date: date
    ideal: float
    remaining: int
    completed: int


@dataclass
class Burndown:
    sprint_id: str
    sprint_name: str
    start_date: date
    end_date: date
    total_points: int
    points: list[BurndownPoint] = field(default_factory=list)


@dataclass
class VelocityPoint:
    sprint_id: str
    sprint_name: str
    start_date: date
    end_date: date
    committed_points: int
    completed_points: int
    percentage_completed: int


@dataclass
class Velocity:
    points: list[VelocityPoint] = field(default_factory=list)
    average_velocity: int = 0

    @property
    def sprint_count(self) -> int:
        return len(self.points)


@dataclass
class WorkloadEntry:
    user_id: str
    total_tasks: int
    total_story_points: int
    tasks_by_status: dict[str, int] = field(default_factory=dict)


@dataclass
class TagCount:
    tag_id: str
    count: int


@dataclass
class ProjectSummary:
    project_id: str
    total_tasks: int
    total_story_points: int
    tasks_by_status: dict[str, int] = field(default_factory=dict)
    tasks_by_type: dict[str, int] = field(default_factory=dict)
    tasks_by_priority: dict[str, int] = field(default_factory=dict)
    active_sprints: int = 0
    completed_sprints: int = 0
    average_velocity: int = 0
    bug_ratio: float = 0.0
    top_tags: list[TagCount] = field(default_factory=list)
