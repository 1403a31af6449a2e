"""Shared fixtures for shell tests: in-memory store and a pinned clock."""

from datetime import datetime, timezone

import pytest

from src.shell.auth import Session
from src.shell.memory_store import InMemoryStore
from src.shell.tracker import NutritionTracker


class FrozenClock:
    """Clock that returns fixed values until moved."""

    def __init__(self, now: datetime, today: str) -> None:
        self._now = now
        self._today = today

    def now(self) -> datetime:
        return self._now

    def today(self) -> str:
        return self._today

    def set(self, now: datetime, today: str | None = None) -> None:
        self._now = now
        if today is not None:
            self._today = today


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc), "2026-03-01")


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def tracker(store, clock):
    return NutritionTracker(store, clock)


@pytest.fixture
def session():
    return Session(user_id="a" * 32)


@pytest.fixture
def other_session():
    return Session(user_id="b" * 32)
