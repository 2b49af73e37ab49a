"""Metrics service: loads sprints and tasks, delegates to the pure calculators."""

from __future__ import annotations

from ..clock import Clock, utc_now
from ..config import EngineConfig
from ..metrics import (
    Burndown,
    ProjectSummary,
    SprintHealth,
    SprintSummary,
    Velocity,
    WorkloadEntry,
    burndown_series,
    classify_health,
    project_summary,
    sprint_summary,
    team_workload,
    velocity_series,
)
from ..workflow.documents import task_from_document
from ..workflow.interface import TASKS, DocumentStore
from .sprints import SprintService


class MetricsService:
    def __init__(
        self,
        store: DocumentStore,
        sprints: SprintService,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.sprints = sprints
        self.config = config or EngineConfig()
        self.clock = clock or utc_now

    async def sprint_summary(self, sprint_id: str) -> SprintSummary:
        sprint = await self.sprints.get_sprint(sprint_id)
        tasks = await self.sprints.tasks_in_sprint(sprint_id)
        return sprint_summary(sprint, tasks, self.clock().date())

    async def sprint_health(self, sprint_id: str) -> SprintHealth:
        return classify_health(await self.sprint_summary(sprint_id), self.config)

    async def burndown(self, sprint_id: str) -> Burndown:
        sprint = await self.sprints.get_sprint(sprint_id)
        tasks = await self.sprints.tasks_in_sprint(sprint_id)
        return burndown_series(sprint, tasks)

    async def velocity(self, project_id: str, count: int | None = None) -> Velocity:
        if count is None:
            count = self.config.velocity_sprint_count
        return velocity_series(await self.sprints.list_sprints(project_id), count)

    async def team_workload(
        self, project_id: str, sprint_id: str | None = None
    ) -> list[WorkloadEntry]:
        """Workload across the project, or within one sprint when given."""
        filter: dict = {"project_id": project_id}
        if sprint_id is not None:
            await self.sprints.get_sprint(sprint_id)
            filter["sprint_id"] = sprint_id
        docs = await self.store.find(TASKS, filter)
        tasks = [task_from_document(d) for d in docs]
        return team_workload(tasks, self.config.workload_top_n)

    async def project_summary(self, project_id: str) -> ProjectSummary:
        docs = await self.store.find(TASKS, {"project_id": project_id})
        tasks = [task_from_document(d) for d in docs]
        sprints = await self.sprints.list_sprints(project_id)
        return project_summary(project_id, tasks, sprints)
