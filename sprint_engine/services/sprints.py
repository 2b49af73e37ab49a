"""Sprint lifecycle service: state transitions and point bookkeeping."""

from __future__ import annotations

import logging

from ..clock import Clock, utc_now
from ..config import EngineConfig
from ..workflow import sprints as lifecycle
from ..workflow.documents import (
    encode_value,
    sprint_from_document,
    task_from_document,
    to_document,
)
from ..workflow.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..workflow.interface import SPRINTS, TASKS, DocumentStore
from ..workflow.models import Sprint, SprintStatus, Task
from ..workflow.patches import SprintPatch
from ..workflow.tasks import is_finished
from ..workflow.validation import (
    as_date,
    check_capacity,
    check_sprint_dates,
    coerce_enum,
    optional_text,
    require_text,
)

logger = logging.getLogger(__name__)


class SprintService:
    """Owns sprint state and the two derived point totals.

    ``recompute_completed_points`` is the single writer of
    ``completed_points``; ``start_sprint`` is the single writer of
    ``committed_points``. Neither is reachable through ``update_sprint``.
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

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_sprint(self, sprint_id: str) -> Sprint:
        doc = await self.store.find_one(SPRINTS, {"id": sprint_id})
        if doc is None:
            raise NotFoundError("Sprint", sprint_id)
        return sprint_from_document(doc)

    async def list_sprints(
        self, project_id: str | None = None, status=None
    ) -> list[Sprint]:
        filter: dict = {}
        if project_id is not None:
            filter["project_id"] = project_id
        if status is not None:
            filter["status"] = coerce_enum(SprintStatus, status, "status").value
        docs = await self.store.find(SPRINTS, filter, sort=[("start_date", 1)])
        return [sprint_from_document(d) for d in docs]

    async def active_sprint(self, project_id: str) -> Sprint | None:
        active = await self.list_sprints(project_id, SprintStatus.ACTIVE)
        return active[0] if active else None

    async def tasks_in_sprint(self, sprint_id: str) -> list[Task]:
        docs = await self.store.find(TASKS, {"sprint_id": sprint_id})
        return [task_from_document(d) for d in docs]

    async def unfinished_tasks(self, sprint_id: str) -> list[Task]:
        """Tasks still open in the sprint, for the caller to move elsewhere."""
        await self.get_sprint(sprint_id)
        return [
            t for t in await self.tasks_in_sprint(sprint_id) if not is_finished(t)
        ]

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    async def create_sprint(
        self,
        project_id: str,
        name: str,
        start_date,
        end_date,
        capacity: int,
        goal: str = "",
    ) -> Sprint:
        cfg = self.config
        project_id = require_text(project_id, "project_id")
        name = require_text(name, "name", cfg.sprint_name_max_length)
        goal = optional_text(goal, "goal", cfg.sprint_goal_max_length)
        start_date, end_date = as_date(start_date), as_date(end_date)
        check_sprint_dates(start_date, end_date, cfg.max_sprint_days)
        capacity = check_capacity(capacity, cfg.max_capacity)

        now = self.clock()
        sprint = Sprint(
            id="",
            project_id=project_id,
            name=name,
            goal=goal,
            start_date=start_date,
            end_date=end_date,
            capacity=capacity,
            created_at=now,
            updated_at=now,
        )
        doc = to_document(sprint)
        del doc["id"]
        sprint.id = await self.store.insert_one(SPRINTS, doc)
        logger.info("Created sprint %s (%s) in project %s", sprint.id, name, project_id)
        return sprint

    async def update_sprint(self, sprint_id: str, patch: SprintPatch) -> Sprint:
        sprint = await self.get_sprint(sprint_id)
        changes = patch.changes()
        if not changes:
            return sprint

        cfg = self.config
        if "name" in changes:
            sprint.name = require_text(changes["name"], "name", cfg.sprint_name_max_length)
        if "goal" in changes:
            sprint.goal = optional_text(changes["goal"], "goal", cfg.sprint_goal_max_length)
        if "retrospective_notes" in changes:
            sprint.retrospective_notes = optional_text(
                changes["retrospective_notes"], "retrospective_notes"
            )
        if "capacity" in changes:
            sprint.capacity = check_capacity(changes["capacity"], cfg.max_capacity)
        if "start_date" in changes or "end_date" in changes:
            if sprint.status is not SprintStatus.PLANNING:
                raise ValidationError(
                    "Sprint dates can only change while planning", field="start_date"
                )
            start = as_date(changes.get("start_date", sprint.start_date))
            end = as_date(changes.get("end_date", sprint.end_date))
            check_sprint_dates(start, end, cfg.max_sprint_days)
            sprint.start_date, sprint.end_date = start, end

        sprint.updated_at = self.clock()
        fields = set(changes) | {"updated_at"}
        await self._write(sprint, fields)
        return sprint

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start_sprint(self, sprint_id: str) -> Sprint:
        sprint = await self.get_sprint(sprint_id)
        tasks = await self.tasks_in_sprint(sprint_id)
        lifecycle.start(sprint, tasks, self.clock())
        await self._write(
            sprint,
            {"status", "transitions", "committed_points", "completed_points", "updated_at"},
        )
        logger.info(
            "Started sprint %s with %d committed points (capacity %d)",
            sprint_id, sprint.committed_points, sprint.capacity,
        )
        if sprint.committed_points > sprint.capacity:
            logger.warning(
                "Sprint %s is over capacity by %d points",
                sprint_id, sprint.committed_points - sprint.capacity,
            )
        return sprint

    async def recompute_completed_points(self, sprint_id: str) -> Sprint:
        """Re-derive completed points from current task state. Safe to re-run."""
        sprint = await self.get_sprint(sprint_id)
        tasks = await self.tasks_in_sprint(sprint_id)
        before = sprint.completed_points
        lifecycle.recompute_completed_points(sprint, tasks)
        sprint.updated_at = self.clock()
        await self._write(sprint, {"completed_points", "updated_at"})
        if before != sprint.completed_points:
            logger.info(
                "Sprint %s completed points %d -> %d",
                sprint_id, before, sprint.completed_points,
            )
        return sprint

    async def complete_sprint(self, sprint_id: str) -> Sprint:
        sprint = await self.get_sprint(sprint_id)
        lifecycle.complete(sprint, self.clock())
        lifecycle.recompute_completed_points(sprint, await self.tasks_in_sprint(sprint_id))
        await self._write(sprint, {"status", "transitions", "completed_points", "updated_at"})
        logger.info(
            "Completed sprint %s: %d/%d points",
            sprint_id, sprint.completed_points, sprint.committed_points,
        )
        return sprint

    async def archive_sprint(self, sprint_id: str) -> Sprint:
        sprint = await self.get_sprint(sprint_id)
        lifecycle.archive(sprint, self.clock())
        await self._write(sprint, {"status", "transitions", "updated_at"})
        logger.info("Archived sprint %s", sprint_id)
        return sprint

    async def delete_sprint(self, sprint_id: str) -> list[str]:
        """Delete a planning sprint, first unassigning its tasks.

        Returns the ids of the tasks that were moved back to the backlog.
        Not atomic: a failure part way leaves some tasks unassigned.
        """
        sprint = await self.get_sprint(sprint_id)
        if sprint.status is not SprintStatus.PLANNING:
            raise InvalidTransitionError(sprint_id, sprint.status, SprintStatus.ARCHIVED)

        now = encode_value(self.clock())
        cleared = []
        for task in await self.tasks_in_sprint(sprint_id):
            await self.store.update_one(
                TASKS,
                {"id": task.id, "sprint_id": sprint_id},
                {"$set": {"sprint_id": None, "updated_at": now}},
            )
            cleared.append(task.id)

        await self.store.delete_one(SPRINTS, {"id": sprint_id})
        logger.info("Deleted sprint %s, unassigned %d tasks", sprint_id, len(cleared))
        return cleared

    async def _write(self, sprint: Sprint, fields: set[str]) -> None:
        doc = to_document(sprint)
        updated = await self.store.update_one(
            SPRINTS,
            {"id": sprint.id},
            {"$set": {k: doc[k] for k in sorted(fields)}},
        )
        if not updated:
            raise NotFoundError("Sprint", sprint.id)
