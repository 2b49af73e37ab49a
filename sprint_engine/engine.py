"""Engine facade wiring one store, config and clock into the services."""

from __future__ import annotations

from .clock import Clock, utc_now
from .config import EngineConfig
from .services import (
    KanbanService,
    MetricsService,
    RetrospectiveService,
    SprintService,
    TaskService,
)
from .workflow.interface import DocumentStore


class Engine:
    """Entry point for callers: ``engine.tasks``, ``engine.sprints`` and so on.

    All services share the same store, config and clock, so a task status
    change made through ``engine.kanban`` is visible to ``engine.metrics``
    immediately.
    """

    def __init__(
        self,
        store: DocumentStore,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.config = config or EngineConfig()
        self.clock = clock or utc_now

        self.sprints = SprintService(store, self.config, self.clock)
        self.tasks = TaskService(store, self.sprints, self.config, self.clock)
        self.metrics = MetricsService(store, self.sprints, self.config, self.clock)
        self.kanban = KanbanService(self.tasks, self.config)
        self.retrospectives = RetrospectiveService(store, self.sprints, self.config, self.clock)
