"""Shared test configuration."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from sprint_engine.adapters.memory import InMemoryDocumentStore
from sprint_engine.engine import Engine


class FakeClock:
    """Settable clock; services call it like ``utc_now``."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, day: date, hour: int = 12) -> None:
        self.moment = datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.moment += timedelta(days=days, hours=hours)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 9, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def engine(store, clock):
    return Engine(store, clock=clock)
