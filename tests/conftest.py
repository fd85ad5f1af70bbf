"""
Pytest fixtures for the weekly poll tests.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from main import app, get_store
from store import InMemoryVoteStore


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    # Wednesday afternoon
    return FakeClock(datetime(2025, 10, 15, 14, 30))


@pytest.fixture
def store(clock) -> InMemoryVoteStore:
    return InMemoryVoteStore(clock=clock)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
