from .models import SessionStats, SessionSummary
from .rules import (
    build_settings,
    check_column,
    may_modify_card,
    next_order,
    require_facilitator,
    session_stats,
    votes_used,
)

__all__ = [
    "SessionStats",
    "SessionSummary",
    "build_settings",
    "check_column",
    "may_modify_card",
    "next_order",
    "require_facilitator",
    "session_stats",
    "votes_used",
]
