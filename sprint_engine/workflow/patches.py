"""Partial-update payloads.

Each patch names exactly the fields a caller may change on its entity.
Fields left at ``UNSET`` are not touched; ``None`` is a real value (for
example "clear the sprint"). Derived fields such as ``completed_at`` or
``completed_points`` have no patch field and so cannot be written this way.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class _Patch:
    def changes(self) -> dict[str, Any]:
        """Return only the fields that were explicitly set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a patch from a loose mapping, rejecting unknown keys."""
        from .exceptions import ValidationError

        allowed = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ValidationError(
                f"Field(s) not updatable: {', '.join(unknown)}", field=unknown[0]
            )
        return cls(**data)


@dataclass
class TaskPatch(_Patch):
    title: Any = UNSET
    description: Any = UNSET
    type: Any = UNSET
    priority: Any = UNSET
    status: Any = UNSET
    story_points: Any = UNSET
    assignee_ids: Any = UNSET
    sprint_id: Any = UNSET
    parent_id: Any = UNSET
    tag_ids: Any = UNSET
    dependency_ids: Any = UNSET
    due_date: Any = UNSET
    acceptance_criteria: Any = UNSET
    estimated_hours: Any = UNSET
    actual_hours: Any = UNSET


@dataclass
class SprintPatch(_Patch):
    name: Any = UNSET
    goal: Any = UNSET
    capacity: Any = UNSET
    start_date: Any = UNSET
    end_date: Any = UNSET
    retrospective_notes: Any = UNSET


@dataclass
class SessionPatch(_Patch):
    phase: Any = UNSET
    # partial mapping merged over the existing settings
    settings: Any = UNSET


@dataclass
class CardPatch(_Patch):
    content: Any = UNSET
    group_id: Any = UNSET
    group_title: Any = UNSET
    order: Any = UNSET


@dataclass
class ActionItemPatch(_Patch):
    title: Any = UNSET
    description: Any = UNSET
    assignee_id: Any = UNSET
    status: Any = UNSET
    due_date: Any = UNSET
    card_ids: Any = UNSET
