"""Task lifecycle service.

Every mutation that can change a sprint's completed total (status, sprint
membership, story points) recomputes the affected sprints before it returns:
the task's previous sprint and its new one when they differ.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from ..clock import Clock, utc_now
from ..config import EngineConfig
from ..workflow.documents import task_from_document, to_document
from ..workflow.exceptions import NotFoundError, ValidationError
from ..workflow.interface import TASKS, DocumentStore
from ..workflow.models import (
    PARENT_TYPES,
    AcceptanceCriterion,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from ..workflow.patches import UNSET, TaskPatch
from ..workflow.tasks import apply_status
from ..workflow.validation import (
    check_hours,
    check_id_list,
    check_optional_date,
    check_story_points,
    coerce_enum,
    optional_text,
    require_text,
)
from .sprints import SprintService

logger = logging.getLogger(__name__)

# Fields whose change can move a sprint's completed-points total.
_POINT_FIELDS = frozenset({"status", "sprint_id", "story_points"})


class TaskService:
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

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_task(self, task_id: str) -> Task:
        doc = await self.store.find_one(TASKS, {"id": task_id})
        if doc is None:
            raise NotFoundError("Task", task_id)
        return task_from_document(doc)

    async def list_tasks(
        self,
        project_id: str | None = None,
        sprint_id=UNSET,
        status=None,
        assignee_id: str | None = None,
    ) -> list[Task]:
        """List tasks, newest first. ``sprint_id=None`` selects the backlog."""
        filter: dict = {}
        if project_id is not None:
            filter["project_id"] = project_id
        if sprint_id is not UNSET:
            filter["sprint_id"] = sprint_id
        if status is not None:
            filter["status"] = coerce_enum(TaskStatus, status, "status").value
        if assignee_id is not None:
            filter["assignee_ids"] = assignee_id
        docs = await self.store.find(TASKS, filter, sort=[("created_at", -1)])
        return [task_from_document(d) for d in docs]

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_task(
        self,
        project_id: str,
        title: str,
        reporter_id: str,
        type=TaskType.TASK,
        priority=TaskPriority.MEDIUM,
        status=TaskStatus.BACKLOG,
        story_points: int | None = None,
        description: str = "",
        assignee_ids: Iterable[str] | None = None,
        sprint_id: str | None = None,
        parent_id: str | None = None,
        tag_ids: Iterable[str] | None = None,
        dependency_ids: Iterable[str] | None = None,
        due_date=None,
        acceptance_criteria: Iterable | None = None,
        estimated_hours: float | None = None,
        actual_hours: float | None = None,
    ) -> Task:
        now = self.clock()
        task = Task(
            id="",
            project_id=require_text(project_id, "project_id"),
            title=require_text(title, "title", self.config.task_title_max_length),
            type=coerce_enum(TaskType, type, "type"),
            priority=coerce_enum(TaskPriority, priority, "priority"),
            status=TaskStatus.BACKLOG,
            reporter_id=require_text(reporter_id, "reporter_id"),
            description=optional_text(description, "description"),
            story_points=check_story_points(story_points),
            assignee_ids=check_id_list(assignee_ids, "assignee_ids"),
            tag_ids=check_id_list(tag_ids, "tag_ids"),
            dependency_ids=check_id_list(dependency_ids, "dependency_ids"),
            due_date=check_optional_date(due_date, "due_date"),
            acceptance_criteria=_criteria(acceptance_criteria),
            estimated_hours=check_hours(estimated_hours, "estimated_hours"),
            actual_hours=check_hours(actual_hours, "actual_hours"),
            created_at=now,
            updated_at=now,
        )
        apply_status(task, coerce_enum(TaskStatus, status, "status"), now)
        task.updated_at = now
        if parent_id is not None:
            await self._check_parent(task, parent_id)
            task.parent_id = parent_id
        if sprint_id is not None:
            await self._check_sprint(task, sprint_id)
            task.sprint_id = sprint_id

        doc = to_document(task)
        del doc["id"]
        task.id = await self.store.insert_one(TASKS, doc)
        logger.info("Created task %s (%s) in project %s", task.id, task.title, task.project_id)

        if task.sprint_id is not None:
            await self._recompute(task.sprint_id)
        return task

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        """Apply a validated partial update.

        Status and sprint changes follow the same rules as ``update_status``
        and ``reassign_sprint``; affected sprints are recomputed.
        """
        task = await self.get_task(task_id)
        changes = patch.changes()
        if not changes:
            return task

        cfg = self.config
        now = self.clock()
        old_sprint_id = task.sprint_id
        written = set(changes) | {"updated_at"}

        if "title" in changes:
            task.title = require_text(changes["title"], "title", cfg.task_title_max_length)
        if "description" in changes:
            task.description = optional_text(changes["description"], "description")
        if "type" in changes:
            task.type = coerce_enum(TaskType, changes["type"], "type")
        if "priority" in changes:
            task.priority = coerce_enum(TaskPriority, changes["priority"], "priority")
        if "story_points" in changes:
            task.story_points = check_story_points(changes["story_points"])
        if "assignee_ids" in changes:
            task.assignee_ids = check_id_list(changes["assignee_ids"], "assignee_ids")
        if "tag_ids" in changes:
            task.tag_ids = check_id_list(changes["tag_ids"], "tag_ids")
        if "dependency_ids" in changes:
            deps = check_id_list(changes["dependency_ids"], "dependency_ids")
            if task.id in deps:
                raise ValidationError("A task cannot depend on itself", field="dependency_ids")
            task.dependency_ids = deps
        if "due_date" in changes:
            task.due_date = check_optional_date(changes["due_date"], "due_date")
        if "acceptance_criteria" in changes:
            task.acceptance_criteria = _criteria(changes["acceptance_criteria"])
        if "estimated_hours" in changes:
            task.estimated_hours = check_hours(changes["estimated_hours"], "estimated_hours")
        if "actual_hours" in changes:
            task.actual_hours = check_hours(changes["actual_hours"], "actual_hours")
        if "parent_id" in changes:
            if changes["parent_id"] is not None:
                await self._check_parent(task, changes["parent_id"])
            task.parent_id = changes["parent_id"]
        if "sprint_id" in changes and changes["sprint_id"] is not None:
            await self._check_sprint(task, changes["sprint_id"])
        if "sprint_id" in changes:
            task.sprint_id = changes["sprint_id"]
        if "status" in changes:
            new_status = coerce_enum(TaskStatus, changes["status"], "status")
            if apply_status(task, new_status, now):
                written |= {"completed_at", "started_at"}
                logger.info("Task %s status -> %s", task.id, new_status.value)

        task.updated_at = now
        await self._write(task, written)

        if _POINT_FIELDS & set(changes):
            await self._recompute(old_sprint_id, task.sprint_id)
        return task

    async def update_status(self, task_id: str, new_status) -> Task:
        """Move a task to any status and recompute its sprint."""
        new_status = coerce_enum(TaskStatus, new_status, "status")
        task = await self.get_task(task_id)
        previous = task.status
        if not apply_status(task, new_status, self.clock()):
            return task

        await self._write(task, {"status", "completed_at", "started_at", "updated_at"})
        logger.info("Task %s status %s -> %s", task.id, previous.value, new_status.value)
        await self._recompute(task.sprint_id)
        return task

    async def reassign_sprint(self, task_id: str, sprint_id: str | None) -> Task:
        """Move a task into a sprint, or back to the backlog with ``None``.

        Recomputes both the sprint it left and the one it joined.
        """
        task = await self.get_task(task_id)
        old_sprint_id = task.sprint_id
        if old_sprint_id == sprint_id:
            return task
        if sprint_id is not None:
            await self._check_sprint(task, sprint_id)

        task.sprint_id = sprint_id
        task.updated_at = self.clock()
        await self._write(task, {"sprint_id", "updated_at"})
        logger.info("Task %s moved from sprint %s to %s", task.id, old_sprint_id, sprint_id)
        await self._recompute(old_sprint_id, sprint_id)
        return task

    async def reassign_tasks(
        self, task_ids: Iterable[str], sprint_id: str | None
    ) -> list[Task]:
        """Bulk move, e.g. the unfinished tasks of a completed sprint.

        Tasks are moved one at a time; a failure part way through leaves the
        earlier moves in place.
        """
        if sprint_id is not None:
            await self.sprints.get_sprint(sprint_id)
        return [await self.reassign_sprint(task_id, sprint_id) for task_id in task_ids]

    async def archive_task(self, task_id: str) -> Task:
        """Soft delete: the task stays in the store with status archived."""
        return await self.update_status(task_id, TaskStatus.ARCHIVED)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _check_parent(self, task: Task, parent_id: str) -> None:
        if parent_id == task.id:
            raise ValidationError("A task cannot be its own parent", field="parent_id")
        parent = await self.get_task(parent_id)
        if parent.type not in PARENT_TYPES:
            raise ValidationError(
                f"Parent must be an epic or story, not {parent.type.value}",
                field="parent_id",
            )
        if parent.project_id != task.project_id:
            raise ValidationError("Parent belongs to another project", field="parent_id")

    async def _check_sprint(self, task: Task, sprint_id: str) -> None:
        sprint = await self.sprints.get_sprint(sprint_id)
        if sprint.project_id != task.project_id:
            raise ValidationError("Sprint belongs to another project", field="sprint_id")

    async def _recompute(self, *sprint_ids: str | None) -> None:
        for sprint_id in dict.fromkeys(s for s in sprint_ids if s is not None):
            try:
                await self.sprints.recompute_completed_points(sprint_id)
            except NotFoundError:
                # the task pointed at a sprint that no longer exists
                logger.warning("Skipped recompute for missing sprint %s", sprint_id)

    async def _write(self, task: Task, fields: set[str]) -> None:
        doc = to_document(task)
        updated = await self.store.update_one(
            TASKS,
            {"id": task.id},
            {"$set": {k: doc[k] for k in sorted(fields)}},
        )
        if not updated:
            raise NotFoundError("Task", task.id)


def _criteria(items: Iterable | None) -> list[AcceptanceCriterion]:
    if items is None:
        return []
    result = []
    for item in items:
        if isinstance(item, AcceptanceCriterion):
            criterion = item
        elif isinstance(item, dict):
            criterion = AcceptanceCriterion(
                id=item.get("id") or uuid.uuid4().hex,
                text=item.get("text", ""),
                completed=bool(item.get("completed", False)),
            )
        else:
            raise ValidationError(
                "Acceptance criteria must be objects with text", field="acceptance_criteria"
            )
        criterion.text = require_text(criterion.text, "acceptance_criteria")
        result.append(criterion)
    return result
