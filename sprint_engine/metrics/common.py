"""Small numeric and counting helpers shared by the metric calculators."""

from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum

from ..workflow.models import Task


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves up (12.5 -> 13, not 12 as ``round`` gives)."""
    return math.floor(value + 0.5)


def round_one(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def histogram(tasks: Iterable[Task], attr: str, enum_cls: type[Enum]) -> dict[str, int]:
    """Count tasks per enum value, listing every value even when zero."""
    counts = {member.value: 0 for member in enum_cls}
    for task in tasks:
        counts[getattr(task, attr).value] += 1
    return counts
