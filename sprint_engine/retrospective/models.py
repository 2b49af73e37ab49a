"""Read models for retrospective sessions."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..workflow.models import RetrospectiveActionItem, RetrospectiveCard, RetrospectiveSession


@dataclass
class SessionStats:
    total_cards: int = 0
    total_votes: int = 0
    total_actions: int = 0
    participant_count: int = 0
    completed_actions: int = 0


@dataclass
class SessionSummary:
    session: RetrospectiveSession
    cards: list[RetrospectiveCard] = field(default_factory=list)
    action_items: list[RetrospectiveActionItem] = field(default_factory=list)
    stats: SessionStats = field(default_factory=SessionStats)
