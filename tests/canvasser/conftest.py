"""
Shared fixtures for canvassing tests.
"""
from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """Deterministic clock; call it to read, advance() to move forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Clock starting 2024-05-01 09:00 UTC."""
    return FakeClock(datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def square():
    """Factory for an open square ring [(lat, lng), ...] with its SW corner at (lat, lng)."""
    def _square(lat: float, lng: float, size: float = 0.01):
        return [
            (lat, lng),
            (lat, lng + size),
            (lat + size, lng + size),
            (lat + size, lng),
        ]
    return _square
