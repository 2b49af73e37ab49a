from .kanban import KanbanService
from .metrics import MetricsService
from .retrospectives import RetrospectiveService
from .sprints import SprintService
from .tasks import TaskService

__all__ = [
    "TaskService",
    "SprintService",
    "MetricsService",
    "KanbanService",
    "RetrospectiveService",
]
