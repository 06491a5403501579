from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from jp_trainer.srs import database
from jp_trainer.srs.grading import GradingService
from jp_trainer.srs.memory_store import InMemoryCardRegistry, InMemoryEventLog, InMemoryStateStore

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def state_store():
    return InMemoryStateStore()


@pytest.fixture
def event_log(clock):
    return InMemoryEventLog(clock)


@pytest.fixture
def service(state_store, event_log, clock):
    return GradingService(state_store, event_log, clock=clock, leech_page_size=50)


@pytest.fixture
def registry():
    return InMemoryCardRegistry(["vocab-1", "kanji-1"])


@pytest.fixture
def sql_engine():
    """Fresh in-memory SQLite database with the SRS schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database.init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sql_engine):
    return database.get_session_factory(sql_engine)
