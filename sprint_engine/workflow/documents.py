"""Conversion between domain dataclasses and store documents.

Documents hold only JSON-friendly values: enums are stored by value and
dates/datetimes as ISO-8601 strings, so the same document works for the
in-memory store and the JSON file store.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from typing import Any

from .models import (
    AcceptanceCriterion,
    ActionItemStatus,
    RetrospectiveActionItem,
    RetrospectiveCard,
    RetrospectiveFormat,
    RetrospectivePhase,
    RetrospectiveSession,
    RetrospectiveSettings,
    Sprint,
    SprintStatus,
    SprintTransition,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
)


def encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, list):
        return [encode_value(v) for v in value]
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    return value


def to_document(entity) -> dict[str, Any]:
    """Serialize any domain dataclass into a store document."""
    return encode_value(asdict(entity))


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def task_from_document(doc: dict[str, Any]) -> Task:
    return Task(
        id=doc["id"],
        project_id=doc["project_id"],
        title=doc["title"],
        type=TaskType(doc["type"]),
        priority=TaskPriority(doc["priority"]),
        status=TaskStatus(doc["status"]),
        reporter_id=doc["reporter_id"],
        description=doc.get("description", ""),
        story_points=doc.get("story_points"),
        assignee_ids=list(doc.get("assignee_ids", [])),
        sprint_id=doc.get("sprint_id"),
        parent_id=doc.get("parent_id"),
        tag_ids=list(doc.get("tag_ids", [])),
        dependency_ids=list(doc.get("dependency_ids", [])),
        due_date=_date(doc.get("due_date")),
        acceptance_criteria=[
            AcceptanceCriterion(**c) for c in doc.get("acceptance_criteria", [])
        ],
        estimated_hours=doc.get("estimated_hours"),
        actual_hours=doc.get("actual_hours"),
        created_at=_dt(doc.get("created_at")),
        updated_at=_dt(doc.get("updated_at")),
        started_at=_dt(doc.get("started_at")),
        completed_at=_dt(doc.get("completed_at")),
    )


def sprint_from_document(doc: dict[str, Any]) -> Sprint:
    return Sprint(
        id=doc["id"],
        project_id=doc["project_id"],
        name=doc["name"],
        start_date=_date(doc["start_date"]),
        end_date=_date(doc["end_date"]),
        capacity=doc["capacity"],
        status=SprintStatus(doc["status"]),
        goal=doc.get("goal", ""),
        committed_points=doc.get("committed_points", 0),
        completed_points=doc.get("completed_points", 0),
        retrospective_notes=doc.get("retrospective_notes", ""),
        transitions=[
            SprintTransition(
                from_status=SprintStatus(t["from_status"]),
                to_status=SprintStatus(t["to_status"]),
                timestamp=_dt(t["timestamp"]),
            )
            for t in doc.get("transitions", [])
        ],
        created_at=_dt(doc.get("created_at")),
        updated_at=_dt(doc.get("updated_at")),
    )


def session_from_document(doc: dict[str, Any]) -> RetrospectiveSession:
    settings = doc.get("settings") or {}
    return RetrospectiveSession(
        id=doc["id"],
        sprint_id=doc["sprint_id"],
        format=RetrospectiveFormat(doc["format"]),
        facilitator_id=doc["facilitator_id"],
        phase=RetrospectivePhase(doc.get("phase", "setup")),
        settings=RetrospectiveSettings(**settings),
        created_at=_dt(doc.get("created_at")),
        updated_at=_dt(doc.get("updated_at")),
    )


def card_from_document(doc: dict[str, Any]) -> RetrospectiveCard:
    return RetrospectiveCard(
        id=doc["id"],
        session_id=doc["session_id"],
        sprint_id=doc["sprint_id"],
        column=doc["column"],
        content=doc["content"],
        author_id=doc["author_id"],
        is_anonymous=doc.get("is_anonymous", False),
        votes=list(doc.get("votes", [])),
        group_id=doc.get("group_id"),
        group_title=doc.get("group_title"),
        order=doc.get("order", 0),
        created_at=_dt(doc.get("created_at")),
        updated_at=_dt(doc.get("updated_at")),
    )


def action_from_document(doc: dict[str, Any]) -> RetrospectiveActionItem:
    return RetrospectiveActionItem(
        id=doc["id"],
        session_id=doc["session_id"],
        sprint_id=doc["sprint_id"],
        title=doc["title"],
        description=doc.get("description", ""),
        assignee_id=doc.get("assignee_id"),
        status=ActionItemStatus(doc.get("status", "todo")),
        due_date=_date(doc.get("due_date")),
        card_ids=list(doc.get("card_ids", [])),
        created_at=_dt(doc.get("created_at")),
        updated_at=_dt(doc.get("updated_at")),
    )
