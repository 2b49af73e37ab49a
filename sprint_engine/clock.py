"""Time source injected into the services."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def fixed_clock(moment: datetime) -> Clock:
    """A clock frozen at ``moment``. Handy for deterministic metrics."""
    return lambda: moment
