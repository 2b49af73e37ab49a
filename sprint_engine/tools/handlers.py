"""Pure handler functions for sprint engine MCP tools.

Each handler takes (args, engine) and returns MCP result format. The text
block holds a JSON envelope: ``{"success": true, "data": ...}`` or
``{"success": false, "error": {"code", "message", "field"?}}``.
No SDK dependency, testable with an in-memory store.
"""

from __future__ import annotations

import functools
import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any

from ..engine import Engine
from ..workflow.documents import encode_value
from ..workflow.exceptions import EngineError, ValidationError
from ..workflow.patches import (
    UNSET,
    ActionItemPatch,
    CardPatch,
    SessionPatch,
    SprintPatch,
    TaskPatch,
)

logger = logging.getLogger(__name__)

_DATE_FIELDS = ("due_date", "start_date", "end_date")


def _text_result(text: str) -> dict[str, Any]:
    """Build MCP tool result with a text content block."""
    return {"content": [{"type": "text", "text": text}]}


def _json_result(data: Any) -> dict[str, Any]:
    """Build MCP tool result with JSON-serialized content."""
    return _text_result(json.dumps(data, indent=2, default=str))


def _serialize(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return encode_value(asdict(value))
    if isinstance(value, dict):
        return {encode_value(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return encode_value(value)


def _success(data: Any) -> dict[str, Any]:
    return _json_result({"success": True, "data": _serialize(data)})


def _failure(error: dict[str, Any]) -> dict[str, Any]:
    return _json_result({"success": False, "error": error})


def _handler(fn):
    """Wrap a handler so engine errors become error envelopes."""

    @functools.wraps(fn)
    async def wrapper(args: dict[str, Any], engine: Engine) -> dict[str, Any]:
        try:
            return _success(await fn(args, engine))
        except EngineError as e:
            return _failure(e.to_dict())
        except Exception:
            logger.exception("Tool %s failed", fn.__name__)
            return _failure({"code": "INTERNAL_ERROR", "message": "Internal error"})

    return wrapper


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _parse_json(value: Any, field: str) -> Any:
    """MCP schemas are flat, so structured values may arrive as JSON strings."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        raise ValidationError(f"{field} must be valid JSON", field=field) from None


def _parse_date(value: Any, field: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date", field=field) from None


def _require(args: dict[str, Any], key: str) -> Any:
    value = args.get(key)
    if value is None or value == "":
        raise ValidationError(f"Missing argument: {key}", field=key)
    return value


def _optional(args: dict[str, Any], key: str) -> Any:
    value = args.get(key)
    return None if value == "" else value


def _id_list(args: dict[str, Any], key: str) -> list[str] | None:
    value = _parse_json(_optional(args, key), key)
    if isinstance(value, str):
        return [value]
    return value


def _changes(args: dict[str, Any]) -> dict[str, Any]:
    changes = _parse_json(args.get("changes", {}), "changes") or {}
    if not isinstance(changes, dict):
        raise ValidationError("changes must be an object", field="changes")
    for key in _DATE_FIELDS:
        if key in changes:
            changes[key] = _parse_date(changes[key], key)
    return changes


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@_handler
async def create_task_handler(args: dict[str, Any], engine: Engine):
    """Create a task, optionally inside a sprint."""
    return await engine.tasks.create_task(
        project_id=_require(args, "project_id"),
        title=_require(args, "title"),
        reporter_id=_require(args, "actor_id"),
        type=args.get("type") or "task",
        priority=args.get("priority") or "medium",
        status=args.get("status") or "backlog",
        story_points=_optional(args, "story_points"),
        description=args.get("description") or "",
        assignee_ids=_id_list(args, "assignee_ids"),
        sprint_id=_optional(args, "sprint_id"),
        parent_id=_optional(args, "parent_id"),
        tag_ids=_id_list(args, "tag_ids"),
        dependency_ids=_id_list(args, "dependency_ids"),
        due_date=_parse_date(args.get("due_date"), "due_date"),
        acceptance_criteria=_parse_json(_optional(args, "acceptance_criteria"), "acceptance_criteria"),
        estimated_hours=_optional(args, "estimated_hours"),
        actual_hours=_optional(args, "actual_hours"),
    )


@_handler
async def get_task_handler(args: dict[str, Any], engine: Engine):
    return await engine.tasks.get_task(_require(args, "task_id"))


@_handler
async def list_tasks_handler(args: dict[str, Any], engine: Engine):
    """List tasks of a project. ``sprint_id: "backlog"`` selects unassigned tasks."""
    sprint_id = _optional(args, "sprint_id")
    if sprint_id is None:
        sprint_id = UNSET
    elif sprint_id == "backlog":
        sprint_id = None
    return await engine.tasks.list_tasks(
        project_id=_optional(args, "project_id"),
        sprint_id=sprint_id,
        status=_optional(args, "status"),
        assignee_id=_optional(args, "assignee_id"),
    )


@_handler
async def update_task_handler(args: dict[str, Any], engine: Engine):
    return await engine.tasks.update_task(_require(args, "task_id"), TaskPatch.from_dict(_changes(args)))


@_handler
async def update_task_status_handler(args: dict[str, Any], engine: Engine):
    return await engine.tasks.update_status(_require(args, "task_id"), _require(args, "status"))


@_handler
async def reassign_task_sprint_handler(args: dict[str, Any], engine: Engine):
    """Move one task to a sprint, or to the backlog when sprint_id is empty."""
    return await engine.tasks.reassign_sprint(_require(args, "task_id"), _optional(args, "sprint_id"))


@_handler
async def reassign_tasks_handler(args: dict[str, Any], engine: Engine):
    return await engine.tasks.reassign_tasks(
        _id_list(args, "task_ids") or [], _optional(args, "sprint_id")
    )


@_handler
async def archive_task_handler(args: dict[str, Any], engine: Engine):
    return await engine.tasks.archive_task(_require(args, "task_id"))


# ---------------------------------------------------------------------------
# Sprints
# ---------------------------------------------------------------------------


@_handler
async def create_sprint_handler(args: dict[str, Any], engine: Engine):
    return await engine.sprints.create_sprint(
        project_id=_require(args, "project_id"),
        name=_require(args, "name"),
        start_date=_parse_date(_require(args, "start_date"), "start_date"),
        end_date=_parse_date(_require(args, "end_date"), "end_date"),
        capacity=_require(args, "capacity"),
        goal=args.get("goal") or "",
    )


@_handler
async def get_sprint_handler(args: dict[str, Any], engine: Engine):
    return await engine.sprints.get_sprint(_require(args, "sprint_id"))


@_handler
async def list_sprints_handler(args: dict[str, Any], engine: Engine):
    return await engine.sprints.list_sprints(
        _optional(args, "project_id"), _optional(args, "status")
    )


@_handler
async def update_sprint_handler(args: dict[str, Any], engine: Engine):
    return await engine.sprints.update_sprint(
        _require(args, "sprint_id"), SprintPatch.from_dict(_changes(args))
    )


@_handler
async def start_sprint_handler(args: dict[str, Any], engine: Engine):
    return await engine.sprints.start_sprint(_require(args, "sprint_id"))


@_handler
async def complete_sprint_handler(args: dict[str, Any], engine: Engine):
    """Complete a sprint and report the tasks it left unfinished."""
    sprint = await engine.sprints.complete_sprint(_require(args, "sprint_id"))
    unfinished = await engine.sprints.unfinished_tasks(sprint.id)
    return {"sprint": sprint, "unfinished_task_ids": [t.id for t in unfinished]}


@_handler
async def archive_sprint_handler(args: dict[str, Any], engine: Engine):
    return await engine.sprints.archive_sprint(_require(args, "sprint_id"))


@_handler
async def delete_sprint_handler(args: dict[str, Any], engine: Engine):
    cleared = await engine.sprints.delete_sprint(_require(args, "sprint_id"))
    return {"deleted": _require(args, "sprint_id"), "unassigned_task_ids": cleared}


@_handler
async def recompute_sprint_points_handler(args: dict[str, Any], engine: Engine):
    return await engine.sprints.recompute_completed_points(_require(args, "sprint_id"))


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


@_handler
async def get_sprint_summary_handler(args: dict[str, Any], engine: Engine):
    return await engine.metrics.sprint_summary(_require(args, "sprint_id"))


@_handler
async def get_sprint_health_handler(args: dict[str, Any], engine: Engine):
    return await engine.metrics.sprint_health(_require(args, "sprint_id"))


@_handler
async def get_burndown_handler(args: dict[str, Any], engine: Engine):
    return await engine.metrics.burndown(_require(args, "sprint_id"))


@_handler
async def get_velocity_handler(args: dict[str, Any], engine: Engine):
    count = _optional(args, "count")
    if isinstance(count, str):
        try:
            count = int(count)
        except ValueError:
            raise ValidationError("count must be a whole number", field="count") from None
    if count is not None and (isinstance(count, bool) or not isinstance(count, int)):
        raise ValidationError("count must be a whole number", field="count")
    velocity = await engine.metrics.velocity(_require(args, "project_id"), count)
    return {**_serialize(velocity), "sprint_count": velocity.sprint_count}


@_handler
async def get_team_workload_handler(args: dict[str, Any], engine: Engine):
    return await engine.metrics.team_workload(_require(args, "project_id"), _optional(args, "sprint_id"))


@_handler
async def get_project_summary_handler(args: dict[str, Any], engine: Engine):
    return await engine.metrics.project_summary(_require(args, "project_id"))


# ---------------------------------------------------------------------------
# Kanban
# ---------------------------------------------------------------------------


@_handler
async def get_board_handler(args: dict[str, Any], engine: Engine):
    """Board columns with their tasks and any WIP limit overruns."""
    project_id = _require(args, "project_id")
    sprint_id = _optional(args, "sprint_id")
    board = await engine.kanban.board(project_id, sprint_id)
    limits = {c.status: c.wip_limit for c in engine.kanban.columns}
    warnings = await engine.kanban.board_warnings(project_id, sprint_id)
    return {
        "columns": [
            {"status": status, "wip_limit": limits[status], "tasks": tasks}
            for status, tasks in board.items()
        ],
        "warnings": [w.message for w in warnings],
    }


@_handler
async def move_task_handler(args: dict[str, Any], engine: Engine):
    result = await engine.kanban.move_task(
        _require(args, "task_id"), _require(args, "target"), _optional(args, "sprint_id")
    )
    return {
        "task": result.task,
        "changed": result.changed,
        "warnings": [w.message for w in result.warnings],
    }


# ---------------------------------------------------------------------------
# Retrospectives
# ---------------------------------------------------------------------------


@_handler
async def create_retrospective_handler(args: dict[str, Any], engine: Engine):
    return await engine.retrospectives.create_session(
        _require(args, "sprint_id"),
        _require(args, "format"),
        _require(args, "actor_id"),
        _parse_json(_optional(args, "settings"), "settings"),
    )


@_handler
async def get_retrospective_handler(args: dict[str, Any], engine: Engine):
    """Session with its cards, action items and stats, by session or sprint id."""
    retros = engine.retrospectives
    session_id = _optional(args, "session_id")
    if session_id is None:
        session_id = (await retros.get_session_for_sprint(_require(args, "sprint_id"))).id
    return await retros.session_summary(session_id)


@_handler
async def update_retrospective_handler(args: dict[str, Any], engine: Engine):
    return await engine.retrospectives.update_session(
        _require(args, "session_id"), _require(args, "actor_id"), SessionPatch.from_dict(_changes(args))
    )


@_handler
async def delete_retrospective_handler(args: dict[str, Any], engine: Engine):
    removed = await engine.retrospectives.delete_session(_require(args, "session_id"), _require(args, "actor_id"))
    return {"deleted": _require(args, "session_id"), **removed}


@_handler
async def add_card_handler(args: dict[str, Any], engine: Engine):
    return await engine.retrospectives.add_card(
        _require(args, "session_id"),
        _require(args, "column"),
        _require(args, "content"),
        _require(args, "actor_id"),
        bool(args.get("is_anonymous", False)),
    )


@_handler
async def update_card_handler(args: dict[str, Any], engine: Engine):
    return await engine.retrospectives.update_card(
        _require(args, "card_id"), _require(args, "actor_id"), CardPatch.from_dict(_changes(args))
    )


@_handler
async def vote_card_handler(args: dict[str, Any], engine: Engine):
    return await engine.retrospectives.vote(
        _require(args, "card_id"), _require(args, "actor_id"), args.get("action") or "add"
    )


@_handler
async def delete_card_handler(args: dict[str, Any], engine: Engine):
    unlinked = await engine.retrospectives.delete_card(_require(args, "card_id"), _require(args, "actor_id"))
    return {"deleted": _require(args, "card_id"), "unlinked_action_item_ids": unlinked}


@_handler
async def create_action_item_handler(args: dict[str, Any], engine: Engine):
    return await engine.retrospectives.create_action_item(
        _require(args, "session_id"),
        _require(args, "title"),
        description=args.get("description") or "",
        assignee_id=_optional(args, "assignee_id"),
        due_date=_parse_date(args.get("due_date"), "due_date"),
        card_ids=_id_list(args, "card_ids"),
    )


@_handler
async def update_action_item_handler(args: dict[str, Any], engine: Engine):
    return await engine.retrospectives.update_action_item(
        _require(args, "action_id"), ActionItemPatch.from_dict(_changes(args))
    )


@_handler
async def delete_action_item_handler(args: dict[str, Any], engine: Engine):
    await engine.retrospectives.delete_action_item(_require(args, "action_id"))
    return {"deleted": _require(args, "action_id")}
