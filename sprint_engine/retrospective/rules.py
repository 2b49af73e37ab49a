"""Retrospective rules that need no store access."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..config import EngineConfig
from ..workflow.exceptions import ForbiddenError, ValidationError
from ..workflow.models import (
    ActionItemStatus,
    RetrospectiveActionItem,
    RetrospectiveCard,
    RetrospectiveSession,
    RetrospectiveSettings,
)
from .models import SessionStats

SETTINGS_FIELDS = ("allow_anonymous", "votes_per_person", "timer_minutes")


def build_settings(
    values: Mapping[str, Any] | RetrospectiveSettings | None,
    config: EngineConfig,
    base: RetrospectiveSettings | None = None,
) -> RetrospectiveSettings:
    """Merge ``values`` over ``base`` (or the defaults) and validate the result."""
    if isinstance(values, RetrospectiveSettings):
        values = {name: getattr(values, name) for name in SETTINGS_FIELDS}
    if values is not None and not isinstance(values, Mapping):
        raise ValidationError("settings must be an object", field="settings")
    values = dict(values or {})
    unknown = sorted(set(values) - set(SETTINGS_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown setting: {unknown[0]}", field="settings")

    if base is None:
        base = RetrospectiveSettings(votes_per_person=config.default_votes_per_person)
    merged = RetrospectiveSettings(
        allow_anonymous=values.get("allow_anonymous", base.allow_anonymous),
        votes_per_person=values.get("votes_per_person", base.votes_per_person),
        timer_minutes=values.get("timer_minutes", base.timer_minutes),
    )

    if not isinstance(merged.allow_anonymous, bool):
        raise ValidationError("allow_anonymous must be true or false", field="allow_anonymous")
    if not _int_between(merged.votes_per_person, 1, config.max_votes_per_person):
        raise ValidationError(
            f"votes_per_person must be between 1 and {config.max_votes_per_person}",
            field="votes_per_person",
        )
    if merged.timer_minutes is not None and not _int_between(
        merged.timer_minutes, 1, config.max_timer_minutes
    ):
        raise ValidationError(
            f"timer_minutes must be between 1 and {config.max_timer_minutes}",
            field="timer_minutes",
        )
    return merged


def _int_between(value, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def check_column(session: RetrospectiveSession, column: str) -> str:
    if column not in session.columns:
        allowed = ", ".join(session.columns)
        raise ValidationError(
            f"Invalid column {column!r} for {session.format.value} (expected one of: {allowed})",
            field="column",
        )
    return column


def next_order(cards: Iterable[RetrospectiveCard]) -> int:
    """One past the highest order among ``cards``; 0 for an empty column."""
    return max((c.order for c in cards), default=-1) + 1


def require_facilitator(session: RetrospectiveSession, actor_id: str) -> None:
    if session.facilitator_id != actor_id:
        raise ForbiddenError("Only the facilitator can change this session")


def may_modify_card(card: RetrospectiveCard, actor_id: str) -> bool:
    """Authors may change their cards; anyone may change an anonymous one."""
    return card.is_anonymous or card.author_id == actor_id


def votes_used(cards: Iterable[RetrospectiveCard], user_id: str) -> int:
    """Number of distinct cards the user has voted on."""
    return sum(1 for c in cards if user_id in c.votes)


def session_stats(
    cards: list[RetrospectiveCard], actions: list[RetrospectiveActionItem]
) -> SessionStats:
    return SessionStats(
        total_cards=len(cards),
        total_votes=sum(len(c.votes) for c in cards),
        total_actions=len(actions),
        participant_count=len({c.author_id for c in cards}),
        completed_actions=sum(1 for a in actions if a.status is ActionItemStatus.DONE),
    )
