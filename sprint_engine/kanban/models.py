"""Kanban board data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..workflow.models import Task, TaskStatus


@dataclass
class BoardColumn:
    status: TaskStatus
    title: str
    wip_limit: int | None = None


@dataclass
class WipWarning:
    status: TaskStatus
    count: int
    limit: int

    @property
    def message(self) -> str:
        return f"WIP limit exceeded in {self.status.value} ({self.count} / {self.limit})"


@dataclass
class MoveResult:
    task: Task
    changed: bool
    warnings: list[WipWarning] = field(default_factory=list)
