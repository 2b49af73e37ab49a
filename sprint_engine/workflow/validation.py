"""Field-level validation shared by the services."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import TypeVar

from .exceptions import ValidationError
from .models import STORY_POINTS

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], value, field: str) -> E:
    """Accept an enum member or its string value, reject anything else."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field}: {value!r} (expected one of: {allowed})", field=field
        ) from None


def require_text(value, field: str, max_length: int | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{field} must be {max_length} characters or less", field=field
        )
    return value


def optional_text(value, field: str, max_length: int | None = None) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{field} must be {max_length} characters or less", field=field
        )
    return value


def check_story_points(value) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value not in STORY_POINTS:
        allowed = ", ".join(str(p) for p in sorted(STORY_POINTS))
        raise ValidationError(
            f"Invalid story points: {value!r} (expected one of: {allowed})",
            field="story_points",
        )
    return value


def check_hours(value, field: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError(f"{field} must be a positive number", field=field)
    return value


def check_id_list(value, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple, set)) or not all(
        isinstance(v, str) and v for v in value
    ):
        raise ValidationError(f"{field} must be a list of ids", field=field)
    # keep first-seen order, drop duplicates
    return list(dict.fromkeys(value))


def check_sprint_dates(start_date, end_date, max_days: int) -> None:
    if not isinstance(start_date, date) or not isinstance(end_date, date):
        raise ValidationError("start_date and end_date must be dates", field="start_date")
    if end_date <= start_date:
        raise ValidationError("End date must be after start date", field="end_date")
    if (end_date - start_date).days > max_days:
        raise ValidationError(
            f"Sprint duration cannot exceed {max_days} days", field="end_date"
        )


def check_capacity(value, max_capacity: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Capacity must be a whole number", field="capacity")
    if value < 1:
        raise ValidationError("Capacity must be at least 1", field="capacity")
    if value > max_capacity:
        raise ValidationError("Capacity seems unreasonably high", field="capacity")
    return value


def as_date(value):
    """Collapse datetimes to their calendar date; leave anything else alone."""
    return value.date() if isinstance(value, datetime) else value


def check_optional_date(value, field: str) -> date | None:
    if value is None:
        return None
    if not isinstance(value, date):
        raise ValidationError(f"{field} must be a date", field=field)
    return as_date(value)
