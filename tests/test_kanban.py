"""Tests for kanban board logic and KanbanService.move_task."""

from datetime import date, datetime, timedelta, timezone

import pytest

from sprint_engine.config import EngineConfig
from sprint_engine.engine import Engine
from sprint_engine.kanban import default_columns, group_by_column, resolve_status, wip_warnings
from sprint_engine.workflow.exceptions import NotFoundError, ValidationError
from sprint_engine.workflow.models import Task, TaskPriority, TaskStatus, TaskType

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _task(id, status=TaskStatus.TODO, priority=TaskPriority.MEDIUM, minutes=0) -> Task:
    return Task(
        id=id,
        project_id="p-1",
        title=id,
        type=TaskType.TASK,
        priority=priority,
        status=status,
        reporter_id="u-1",
        created_at=BASE + timedelta(minutes=minutes),
    )


async def _create(engine, title="Task", status="todo", **kwargs):
    kwargs.setdefault("project_id", "p-1")
    return await engine.tasks.create_task(title=title, reporter_id="u-1", status=status, **kwargs)


class TestBoard:
    def test_default_columns(self):
        columns = default_columns()
        assert [c.status.value for c in columns] == [
            "backlog", "todo", "in_progress", "in_review", "in_testing", "done",
        ]
        limits = {c.status.value: c.wip_limit for c in columns}
        assert limits == {
            "backlog": None, "todo": None, "in_progress": 5,
            "in_review": 3, "in_testing": 3, "done": None,
        }
        assert columns[1].title == "To Do"

    def test_limits_from_config(self):
        config = EngineConfig(wip_limits={"in_progress": 2})
        limits = {c.status: c.wip_limit for c in default_columns(config)}
        assert limits[TaskStatus.IN_PROGRESS] == 2
        assert limits[TaskStatus.IN_REVIEW] is None

    def test_group_sorts_by_priority_then_newest(self):
        tasks = [
            _task("low-old", priority=TaskPriority.LOW, minutes=0),
            _task("med-old", minutes=1),
            _task("med-new", minutes=5),
            _task("crit", priority=TaskPriority.CRITICAL, minutes=2),
            _task("gone", status=TaskStatus.ARCHIVED),
        ]
        grouped = group_by_column(tasks)
        assert [t.id for t in grouped[TaskStatus.TODO]] == ["crit", "med-new", "med-old", "low-old"]
        assert TaskStatus.ARCHIVED not in grouped

    def test_resolve_status(self):
        other = _task("t-2", status=TaskStatus.IN_REVIEW)
        assert resolve_status("done", {}) is TaskStatus.DONE
        assert resolve_status("t-2", {"t-2": other}) is TaskStatus.IN_REVIEW
        with pytest.raises(ValidationError) as exc:
            resolve_status("nowhere", {"t-2": other})
        assert exc.value.field == "target"

    def test_wip_warnings(self):
        tasks = [_task(f"t-{i}", status=TaskStatus.IN_REVIEW) for i in range(4)]
        warnings = wip_warnings(tasks)
        assert len(warnings) == 1
        assert warnings[0].status is TaskStatus.IN_REVIEW
        assert warnings[0].message == "WIP limit exceeded in in_review (4 / 3)"
        assert wip_warnings(tasks[:3]) == []


class TestMoveTask:
    @pytest.mark.asyncio
    async def test_move_to_status(self, engine):
        sprint = await engine.sprints.create_sprint("p-1", "S", date(2024, 1, 1), date(2024, 1, 15), 20)
        task = await _create(engine, sprint_id=sprint.id, story_points=5)

        result = await engine.kanban.move_task(task.id, "done")

        assert result.changed is True
        assert result.task.status is TaskStatus.DONE
        assert result.task.completed_at is not None
        assert (await engine.sprints.get_sprint(sprint.id)).completed_points == 5

    @pytest.mark.asyncio
    async def test_drop_on_card_joins_its_column(self, engine):
        task = await _create(engine, "Moving")
        target = await _create(engine, "Reviewed", status="in_review")

        result = await engine.kanban.move_task(task.id, target.id)
        assert result.task.status is TaskStatus.IN_REVIEW

    @pytest.mark.asyncio
    async def test_unresolvable_target(self, engine):
        task = await _create(engine)
        with pytest.raises(ValidationError):
            await engine.kanban.move_task(task.id, "t-404")
        assert (await engine.tasks.get_task(task.id)).status is TaskStatus.TODO

    @pytest.mark.asyncio
    async def test_same_status_is_noop(self, engine, clock):
        task = await _create(engine)
        clock.advance(days=1)

        result = await engine.kanban.move_task(task.id, "todo")

        assert result.changed is False
        assert result.warnings == []
        assert (await engine.tasks.get_task(task.id)).updated_at == task.updated_at

    @pytest.mark.asyncio
    async def test_unknown_task(self, engine):
        with pytest.raises(NotFoundError):
            await engine.kanban.move_task("t-404", "done")

    @pytest.mark.asyncio
    async def test_wip_limit_is_advisory(self, engine):
        for i in range(5):
            await _create(engine, f"Busy {i}", status="in_progress")
        task = await _create(engine, "One more")

        result = await engine.kanban.move_task(task.id, "in_progress")

        assert result.changed is True
        assert result.task.status is TaskStatus.IN_PROGRESS
        assert len(result.warnings) == 1
        assert result.warnings[0].count == 6
        assert result.warnings[0].limit == 5

    @pytest.mark.asyncio
    async def test_wip_counted_within_sprint(self, engine):
        sprint = await engine.sprints.create_sprint("p-1", "S", date(2024, 1, 1), date(2024, 1, 15), 20)
        for i in range(5):
            await _create(engine, f"Elsewhere {i}", status="in_progress")
        task = await _create(engine, "Mine", sprint_id=sprint.id)

        result = await engine.kanban.move_task(task.id, "in_progress", sprint_id=sprint.id)
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_custom_limits(self, store, clock):
        engine = Engine(store, EngineConfig(wip_limits={"in_review": 1}), clock)
        await _create(engine, "First", status="in_review")
        task = await _create(engine, "Second")

        result = await engine.kanban.move_task(task.id, "in_review")
        assert [w.limit for w in result.warnings] == [1]


class TestBoardQueries:
    @pytest.mark.asyncio
    async def test_board_and_warnings(self, engine):
        for i in range(4):
            await _create(engine, f"Review {i}", status="in_review")
        await _create(engine, "Other project", status="in_review", project_id="p-2")

        board = await engine.kanban.board("p-1")
        assert len(board[TaskStatus.IN_REVIEW]) == 4
        warnings = await engine.kanban.board_warnings("p-1")
        assert [w.status for w in warnings] == [TaskStatus.IN_REVIEW]
