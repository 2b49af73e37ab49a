from .exceptions import (
    ConflictError,
    EngineError,
    ForbiddenError,
    InvalidTransitionError,
    LimitExceededError,
    NotFoundError,
    ValidationError,
)
from .interface import DocumentStore
from .models import (
    ActionItemStatus,
    RetrospectiveFormat,
    RetrospectivePhase,
    Sprint,
    SprintStatus,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    VoteAction,
)
from .patches import UNSET, ActionItemPatch, CardPatch, SessionPatch, SprintPatch, TaskPatch

__all__ = [
    "Task",
    "Sprint",
    "TaskStatus",
    "TaskType",
    "TaskPriority",
    "SprintStatus",
    "RetrospectiveFormat",
    "RetrospectivePhase",
    "ActionItemStatus",
    "VoteAction",
    "DocumentStore",
    "EngineError",
    "ValidationError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "LimitExceededError",
    "InvalidTransitionError",
    "UNSET",
    "TaskPatch",
    "SprintPatch",
    "SessionPatch",
    "CardPatch",
    "ActionItemPatch",
]
