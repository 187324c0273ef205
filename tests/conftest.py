"""Shared pytest fixtures."""

from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """Manually advanced clock for deterministic time-based tests."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Clock fixed at 2024-06-01 12:00 UTC until advanced."""
    return FakeClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))
