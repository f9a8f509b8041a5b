import os
from datetime import datetime, timezone

import pytest

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from glow_tracker.kvstore import InMemoryKeyValueStore  # noqa: E402


class FakeClock:
    """Callable clock whose current moment tests can move."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 25, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()
