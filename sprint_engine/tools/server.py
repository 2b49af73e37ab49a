"""MCP server factory binding handlers to a sprint engine."""

from typing import Any

from claude_agent_sdk import create_sdk_mcp_server, tool

from ..engine import Engine
from . import handlers

# (name, description, input schema, handler)
TOOL_SPECS: list[tuple[str, str, dict[str, Any], Any]] = [
    # --- Tasks ---
    (
        "create_task",
        "Create a task. List fields (assignee_ids, tag_ids, dependency_ids, "
        "acceptance_criteria) may be JSON strings. Dates are YYYY-MM-DD.",
        {
            "project_id": str, "title": str, "actor_id": str, "type": str,
            "priority": str, "status": str, "story_points": int, "description": str,
            "assignee_ids": str, "sprint_id": str, "parent_id": str, "tag_ids": str,
            "dependency_ids": str, "due_date": str, "acceptance_criteria": str,
            "estimated_hours": float, "actual_hours": float,
        },
        handlers.create_task_handler,
    ),
    ("get_task", "Get a task by ID", {"task_id": str}, handlers.get_task_handler),
    (
        "list_tasks",
        "List tasks, newest first. Filter by project_id, sprint_id ('backlog' for "
        "unassigned), status and assignee_id.",
        {"project_id": str, "sprint_id": str, "status": str, "assignee_id": str},
        handlers.list_tasks_handler,
    ),
    (
        "update_task",
        "Update task fields. changes is a JSON object of the fields to set.",
        {"task_id": str, "changes": str},
        handlers.update_task_handler,
    ),
    (
        "update_task_status",
        "Move a task to any status; the sprint's completed points are recomputed",
        {"task_id": str, "status": str},
        handlers.update_task_status_handler,
    ),
    (
        "reassign_task_sprint",
        "Move a task into a sprint, or to the backlog when sprint_id is empty",
        {"task_id": str, "sprint_id": str},
        handlers.reassign_task_sprint_handler,
    ),
    (
        "reassign_tasks",
        "Move several tasks (task_ids as JSON list) into a sprint or the backlog",
        {"task_ids": str, "sprint_id": str},
        handlers.reassign_tasks_handler,
    ),
    ("archive_task", "Archive (soft delete) a task", {"task_id": str}, handlers.archive_task_handler),
    # --- Sprints ---
    (
        "create_sprint",
        "Create a sprint in planning. Dates are YYYY-MM-DD; capacity is in story points.",
        {
            "project_id": str, "name": str, "start_date": str, "end_date": str,
            "capacity": int, "goal": str,
        },
        handlers.create_sprint_handler,
    ),
    ("get_sprint", "Get a sprint by ID", {"sprint_id": str}, handlers.get_sprint_handler),
    (
        "list_sprints",
        "List sprints by start date, optionally filtered by project_id and status",
        {"project_id": str, "status": str},
        handlers.list_sprints_handler,
    ),
    (
        "update_sprint",
        "Update sprint name, goal, capacity, dates or retrospective notes. "
        "changes is a JSON object.",
        {"sprint_id": str, "changes": str},
        handlers.update_sprint_handler,
    ),
    (
        "start_sprint",
        "Start a planning sprint and snapshot its committed points",
        {"sprint_id": str},
        handlers.start_sprint_handler,
    ),
    (
        "complete_sprint",
        "Complete an active sprint; returns the IDs of unfinished tasks to move",
        {"sprint_id": str},
        handlers.complete_sprint_handler,
    ),
    (
        "archive_sprint",
        "Archive a completed or planning sprint",
        {"sprint_id": str},
        handlers.archive_sprint_handler,
    ),
    (
        "delete_sprint",
        "Delete a planning sprint; its tasks go back to the backlog",
        {"sprint_id": str},
        handlers.delete_sprint_handler,
    ),
    (
        "recompute_sprint_points",
        "Recompute a sprint's completed points from its done tasks",
        {"sprint_id": str},
        handlers.recompute_sprint_points_handler,
    ),
    # --- Metrics ---
    (
        "get_sprint_summary",
        "Sprint summary: points, percentage complete, days remaining, scope creep",
        {"sprint_id": str},
        handlers.get_sprint_summary_handler,
    ),
    (
        "get_sprint_health",
        "Classify sprint health as on-track, at-risk or behind, with the reason",
        {"sprint_id": str},
        handlers.get_sprint_health_handler,
    ),
    (
        "get_burndown",
        "Day-by-day burndown series with the ideal line",
        {"sprint_id": str},
        handlers.get_burndown_handler,
    ),
    (
        "get_velocity",
        "Velocity over the last completed sprints (count defaults to 6)",
        {"project_id": str, "count": int},
        handlers.get_velocity_handler,
    ),
    (
        "get_team_workload",
        "Tasks and points per assignee, busiest first, optionally within one sprint",
        {"project_id": str, "sprint_id": str},
        handlers.get_team_workload_handler,
    ),
    (
        "get_project_summary",
        "Project totals by status, type and priority, average velocity, bug ratio, top tags",
        {"project_id": str},
        handlers.get_project_summary_handler,
    ),
    # --- Kanban ---
    (
        "get_board",
        "Kanban board columns with tasks and WIP limit warnings",
        {"project_id": str, "sprint_id": str},
        handlers.get_board_handler,
    ),
    (
        "move_task",
        "Move a task on the board. target is a status or the ID of the card dropped on.",
        {"task_id": str, "target": str, "sprint_id": str},
        handlers.move_task_handler,
    ),
    # --- Retrospectives ---
    (
        "create_retrospective",
        "Open a sprint retrospective (mad-sad-glad, what-went-well, start-stop-continue, 4ls). "
        "settings is an optional JSON object.",
        {"sprint_id": str, "format": str, "actor_id": str, "settings": str},
        handlers.create_retrospective_handler,
    ),
    (
        "get_retrospective",
        "Retrospective with cards, action items and stats, by session_id or sprint_id",
        {"session_id": str, "sprint_id": str},
        handlers.get_retrospective_handler,
    ),
    (
        "update_retrospective",
        "Change phase or settings (facilitator only). changes is a JSON object.",
        {"session_id": str, "actor_id": str, "changes": str},
        handlers.update_retrospective_handler,
    ),
    (
        "delete_retrospective",
        "Delete a retrospective with its cards and action items (facilitator only)",
        {"session_id": str, "actor_id": str},
        handlers.delete_retrospective_handler,
    ),
    (
        "add_card",
        "Add a feedback card to a retrospective column",
        {"session_id": str, "column": str, "content": str, "actor_id": str, "is_anonymous": bool},
        handlers.add_card_handler,
    ),
    (
        "update_card",
        "Edit, group or reorder a card. changes is a JSON object.",
        {"card_id": str, "actor_id": str, "changes": str},
        handlers.update_card_handler,
    ),
    (
        "vote_card",
        "Add or remove the actor's vote on a card (action: add or remove)",
        {"card_id": str, "actor_id": str, "action": str},
        handlers.vote_card_handler,
    ),
    (
        "delete_card",
        "Delete a card (author, or anyone for anonymous cards)",
        {"card_id": str, "actor_id": str},
        handlers.delete_card_handler,
    ),
    (
        "create_action_item",
        "Create an action item, optionally linked to cards (card_ids as JSON list)",
        {
            "session_id": str, "title": str, "description": str, "assignee_id": str,
            "due_date": str, "card_ids": str,
        },
        handlers.create_action_item_handler,
    ),
    (
        "update_action_item",
        "Update an action item. changes is a JSON object.",
        {"action_id": str, "changes": str},
        handlers.update_action_item_handler,
    ),
    (
        "delete_action_item",
        "Delete an action item",
        {"action_id": str},
        handlers.delete_action_item_handler,
    ),
]


def _bind(name: str, description: str, schema: dict[str, Any], handler, engine: Engine):
    @tool(name, description, schema)
    async def bound(args: dict[str, Any]) -> dict[str, Any]:
        return await handler(args, engine)

    return bound


def create_engine_server(engine: Engine):
    """Create an MCP server exposing the engine's operations as tools.

    Each handler is bound to the engine via closure so the @tool wrappers
    are clean single-argument async functions as the SDK expects.
    """
    all_tools = [
        _bind(name, description, schema, handler, engine)
        for name, description, schema, handler in TOOL_SPECS
    ]
    return create_sdk_mcp_server(
        name="sprint_engine",
        version="0.1.0",
        tools=all_tools,
    )
