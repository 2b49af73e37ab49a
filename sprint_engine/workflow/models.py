"""Domain models for tasks, sprints and retrospectives."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class TaskType(Enum):
    STORY = "story"
    TASK = "task"
    BUG = "bug"
    EPIC = "epic"
    SPIKE = "spike"


class TaskPriority(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(Enum):
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    IN_TESTING = "in_testing"
    DONE = "done"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


class SprintStatus(Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


STORY_POINTS: frozenset[int] = frozenset({1, 2, 3, 5, 8, 13, 21})

# Only these task types may be the parent of another task.
PARENT_TYPES: frozenset[TaskType] = frozenset({TaskType.EPIC, TaskType.STORY})


class RetrospectiveFormat(Enum):
    MAD_SAD_GLAD = "mad-sad-glad"
    WHAT_WENT_WELL = "what-went-well"
    START_STOP_CONTINUE = "start-stop-continue"
    FOUR_LS = "4ls"


FORMAT_COLUMNS: dict[RetrospectiveFormat, tuple[str, ...]] = {
    RetrospectiveFormat.MAD_SAD_GLAD: ("mad", "sad", "glad"),
    RetrospectiveFormat.WHAT_WENT_WELL: ("went-well", "improve", "ideas"),
    RetrospectiveFormat.START_STOP_CONTINUE: ("start", "stop", "continue"),
    RetrospectiveFormat.FOUR_LS: ("loved", "loathed", "learned", "longed"),
}


class RetrospectivePhase(Enum):
    SETUP = "setup"
    COLLECTING = "collecting"
    GROUPING = "grouping"
    VOTING = "voting"
    DISCUSSING = "discussing"
    ACTIONS = "actions"
    COMPLETED = "completed"


class ActionItemStatus(Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class VoteAction(Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass
class AcceptanceCriterion:
    id: str
    text: str
    completed: bool = False


@dataclass
class Task:
    id: str
    project_id: str
    title: str
    type: TaskType
    priority: TaskPriority
    status: TaskStatus
    reporter_id: str
    description: str = ""
    story_points: int | None = None
    assignee_ids: list[str] = field(default_factory=list)
    sprint_id: str | None = None
    parent_id: str | None = None
    tag_ids: list[str] = field(default_factory=list)
    dependency_ids: list[str] = field(default_factory=list)
    due_date: date | None = None
    acceptance_criteria: list[AcceptanceCriterion] = field(default_factory=list)
    estimated_hours: float | None = None
    actual_hours: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def points(self) -> int:
        """Story points with unestimated tasks counted as zero."""
        return self.story_points or 0


@dataclass
class SprintTransition:
    from_status: SprintStatus
    to_status: SprintStatus
    timestamp: datetime


@dataclass
class Sprint:
    id: str
    project_id: str
    name: str
    start_date: date
    end_date: date
    capacity: int
    status: SprintStatus = SprintStatus.PLANNING
    goal: str = ""
    committed_points: int = 0
    completed_points: int = 0
    retrospective_notes: str = ""
    transitions: list[SprintTransition] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days


@dataclass
class RetrospectiveSettings:
    allow_anonymous: bool = True
    votes_per_person: int = 5
    timer_minutes: int | None = None


@dataclass
class RetrospectiveSession:
    id: str
    sprint_id: str
    format: RetrospectiveFormat
    facilitator_id: str
    phase: RetrospectivePhase = RetrospectivePhase.SETUP
    settings: RetrospectiveSettings = field(default_factory=RetrospectiveSettings)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def columns(self) -> tuple[str, ...]:
        return FORMAT_COLUMNS[self.format]


@dataclass
class RetrospectiveCard:
    id: str
    session_id: str
    sprint_id: str
    column: str
    content: str
    author_id: str
    is_anonymous: bool = False
    votes: list[str] = field(default_factory=list)
    group_id: str | None = None
    group_title: str | None = None
    order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class RetrospectiveActionItem:
    id: str
    session_id: str
    sprint_id: str
    title: str
    description: str = ""
    assignee_id: str | None = None
    status: ActionItemStatus = ActionItemStatus.TODO
    due_date: date | None = None
    card_ids: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
