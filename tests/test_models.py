"""Tests for domain models, sprint transitions, patches and field validation."""

from datetime import date, datetime, timezone

import pytest

from sprint_engine.workflow.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from sprint_engine.workflow.models import (
    FORMAT_COLUMNS,
    RetrospectiveFormat,
    RetrospectiveSession,
    Sprint,
    SprintStatus,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from sprint_engine.workflow.patches import UNSET, SprintPatch, TaskPatch
from sprint_engine.workflow.tasks import apply_status
from sprint_engine.workflow.transitions import VALID_TRANSITIONS, validate_transition
from sprint_engine.workflow.validation import (
    as_date,
    check_capacity,
    check_id_list,
    check_sprint_dates,
    check_story_points,
    coerce_enum,
    require_text,
)

NOW = datetime(2024, 1, 5, 10, tzinfo=timezone.utc)


def _task(**overrides) -> Task:
    fields = dict(
        id="t-1",
        project_id="p-1",
        title="Task",
        type=TaskType.TASK,
        priority=TaskPriority.MEDIUM,
        status=TaskStatus.TODO,
        reporter_id="u-1",
    )
    fields.update(overrides)
    return Task(**fields)


class TestEnums:
    def test_task_status_values(self):
        assert [s.value for s in TaskStatus] == [
            "backlog", "todo", "in_progress", "in_review", "in_testing",
            "done", "blocked", "cancelled", "archived",
        ]

    def test_every_format_has_columns(self):
        assert set(FORMAT_COLUMNS) == set(RetrospectiveFormat)
        assert FORMAT_COLUMNS[RetrospectiveFormat.FOUR_LS] == (
            "loved", "loathed", "learned", "longed",
        )


class TestTask:
    def test_points_treats_none_as_zero(self):
        assert _task().points == 0
        assert _task(story_points=8).points == 8

    def test_entering_done_sets_completed_at(self):
        task = _task()
        assert apply_status(task, TaskStatus.DONE, NOW) is True
        assert task.completed_at == NOW

    def test_leaving_done_clears_completed_at(self):
        task = _task(status=TaskStatus.DONE, completed_at=NOW)
        apply_status(task, TaskStatus.BLOCKED, NOW)
        assert task.completed_at is None

    def test_same_status_is_no_change(self):
        task = _task()
        assert apply_status(task, TaskStatus.TODO, NOW) is False
        assert task.updated_at is None

    def test_started_at_set_once(self):
        task = _task()
        apply_status(task, TaskStatus.IN_PROGRESS, NOW)
        apply_status(task, TaskStatus.IN_REVIEW, datetime(2024, 1, 6, tzinfo=timezone.utc))
        apply_status(task, TaskStatus.IN_PROGRESS, datetime(2024, 1, 7, tzinfo=timezone.utc))
        assert task.started_at == NOW

    @pytest.mark.parametrize("status", list(TaskStatus))
    def test_completed_at_tracks_done(self, status):
        task = _task(status=TaskStatus.DONE, completed_at=NOW)
        apply_status(task, status, NOW)
        assert (task.completed_at is not None) == (status is TaskStatus.DONE)


class TestSprintModel:
    def test_total_days(self):
        sprint = Sprint(
            id="s-1", project_id="p-1", name="S",
            start_date=date(2024, 1, 1), end_date=date(2024, 1, 15), capacity=20,
        )
        assert sprint.total_days == 14
        assert sprint.status is SprintStatus.PLANNING

    def test_session_columns_follow_format(self):
        session = RetrospectiveSession(
            id="rs-1", sprint_id="s-1",
            format=RetrospectiveFormat.START_STOP_CONTINUE, facilitator_id="u-1",
        )
        assert session.columns == ("start", "stop", "continue")


class TestTransitions:
    def test_valid_edges(self):
        assert VALID_TRANSITIONS == {
            (SprintStatus.PLANNING, SprintStatus.ACTIVE),
            (SprintStatus.ACTIVE, SprintStatus.COMPLETED),
            (SprintStatus.COMPLETED, SprintStatus.ARCHIVED),
            (SprintStatus.PLANNING, SprintStatus.ARCHIVED),
        }

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (SprintStatus.ACTIVE, SprintStatus.PLANNING),
            (SprintStatus.COMPLETED, SprintStatus.ACTIVE),
            (SprintStatus.ACTIVE, SprintStatus.ARCHIVED),
            (SprintStatus.ARCHIVED, SprintStatus.PLANNING),
            (SprintStatus.PLANNING, SprintStatus.COMPLETED),
        ],
    )
    def test_undefined_edges_rejected(self, from_status, to_status):
        with pytest.raises(InvalidTransitionError, match="Invalid transition"):
            validate_transition("s-1", from_status, to_status)

    def test_invalid_transition_is_validation_error(self):
        err = InvalidTransitionError("s-1", SprintStatus.ACTIVE, SprintStatus.PLANNING)
        assert isinstance(err, ValidationError)
        assert err.to_dict() == {
            "code": "VALIDATION_ERROR",
            "message": err.message,
            "field": "status",
        }


class TestErrors:
    def test_not_found_message(self):
        err = NotFoundError("Task", "t-9")
        assert str(err) == "Task not found: t-9"
        assert err.code == "NOT_FOUND"


class TestPatches:
    def test_changes_only_includes_set_fields(self):
        patch = TaskPatch(title="New", sprint_id=None)
        assert patch.changes() == {"title": "New", "sprint_id": None}

    def test_empty_patch(self):
        assert SprintPatch().changes() == {}
        assert not UNSET

    def test_from_dict_rejects_derived_fields(self):
        with pytest.raises(ValidationError, match="completed_points") as exc:
            SprintPatch.from_dict({"name": "x", "completed_points": 99})
        assert exc.value.field == "completed_points"

    def test_task_patch_rejects_completed_at(self):
        with pytest.raises(ValidationError):
            TaskPatch.from_dict({"completed_at": "2024-01-01"})


class TestValidation:
    def test_coerce_enum_accepts_value_and_member(self):
        assert coerce_enum(TaskType, "bug", "type") is TaskType.BUG
        assert coerce_enum(TaskType, TaskType.EPIC, "type") is TaskType.EPIC

    def test_coerce_enum_rejects_unknown(self):
        with pytest.raises(ValidationError) as exc:
            coerce_enum(TaskPriority, "urgent", "priority")
        assert exc.value.field == "priority"

    def test_require_text_strips(self):
        assert require_text("  hello  ", "title") == "hello"

    @pytest.mark.parametrize("value", ["", "   ", None, 5])
    def test_require_text_rejects_blank(self, value):
        with pytest.raises(ValidationError):
            require_text(value, "title")

    def test_require_text_max_length(self):
        require_text("x" * 200, "title", 200)
        with pytest.raises(ValidationError, match="200 characters"):
            require_text("x" * 201, "title", 200)

    def test_story_points_set(self):
        assert check_story_points(None) is None
        assert check_story_points(13) == 13
        for bad in (4, 0, 100, True, "5"):
            with pytest.raises(ValidationError):
                check_story_points(bad)

    def test_id_list_dedupes(self):
        assert check_id_list(["a", "b", "a"], "tag_ids") == ["a", "b"]
        with pytest.raises(ValidationError):
            check_id_list(["a", ""], "tag_ids")

    def test_sprint_dates(self):
        check_sprint_dates(date(2024, 1, 1), date(2024, 1, 2), 60)
        with pytest.raises(ValidationError, match="after start"):
            check_sprint_dates(date(2024, 1, 2), date(2024, 1, 2), 60)
        with pytest.raises(ValidationError, match="60 days"):
            check_sprint_dates(date(2024, 1, 1), date(2024, 3, 2), 60)

    def test_capacity(self):
        assert check_capacity(1, 500) == 1
        for bad in (0, -3, 501, 2.5, True):
            with pytest.raises(ValidationError):
                check_capacity(bad, 500)

    def test_as_date(self):
        assert as_date(NOW) == date(2024, 1, 5)
        assert as_date(date(2024, 1, 5)) == date(2024, 1, 5)
