"""Kanban reconciliation: turns a board drop into a task status change."""

from __future__ import annotations

import logging

from ..config import EngineConfig
from ..kanban.board import default_columns, group_by_column, resolve_status, wip_warnings
from ..kanban.models import BoardColumn, MoveResult
from ..workflow.models import Task, TaskStatus
from .tasks import TaskService

logger = logging.getLogger(__name__)


class KanbanService:
    def __init__(self, tasks: TaskService, config: EngineConfig | None = None):
        self.tasks = tasks
        self.config = config or EngineConfig()

    @property
    def columns(self) -> list[BoardColumn]:
        return default_columns(self.config)

    async def board_tasks(self, project_id: str, sprint_id: str | None = None) -> list[Task]:
        """Tasks visible on the board: the project, or one sprint of it."""
        if sprint_id is None:
            return await self.tasks.list_tasks(project_id=project_id)
        return await self.tasks.list_tasks(project_id=project_id, sprint_id=sprint_id)

    async def board(
        self, project_id: str, sprint_id: str | None = None
    ) -> dict[TaskStatus, list[Task]]:
        return group_by_column(await self.board_tasks(project_id, sprint_id), self.columns)

    async def move_task(
        self, task_id: str, target: str, sprint_id: str | None = None
    ) -> MoveResult:
        """Apply a drop of ``task_id`` onto ``target``.

        ``target`` is a status value or the id of the card it landed on.
        WIP limits only produce warnings; the move is never refused for them.
        """
        task = await self.tasks.get_task(task_id)
        scope = await self.board_tasks(task.project_id, sprint_id)
        new_status = resolve_status(target, {t.id: t for t in scope})

        if new_status is task.status:
            logger.debug("Task %s already in %s, nothing to move", task_id, new_status.value)
            return MoveResult(task=task, changed=False)

        task = await self.tasks.update_status(task_id, new_status)

        after = [t for t in scope if t.id != task.id]
        if sprint_id is None or task.sprint_id == sprint_id:
            after.append(task)
        warnings = [w for w in wip_warnings(after, self.columns) if w.status is new_status]
        for warning in warnings:
            logger.warning("Task %s moved: %s", task_id, warning.message)
        return MoveResult(task=task, changed=True, warnings=warnings)

    async def board_warnings(self, project_id: str, sprint_id: str | None = None):
        return wip_warnings(await self.board_tasks(project_id, sprint_id), self.columns)
