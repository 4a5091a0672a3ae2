from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Tuple

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sleepwatch.database import Base
from sleepwatch.models import caregiver, notification_log, person, sleep_log  # noqa: F401  register tables
from sleepwatch.services.tracker import SleepTracker

T0 = datetime(2024, 3, 1, 21, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeTimers:
    """Delayed callbacks that only fire when the test advances the clock."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.jobs: Dict[str, Tuple[datetime, Callable[[], None]]] = {}
        self.scheduled: List[str] = []

    def schedule(self, key: str, delay: timedelta, callback: Callable[[], None]) -> None:
        self.jobs[key] = (self.clock.now + delay, callback)
        self.scheduled.append(key)

    def cancel(self, key: str) -> None:
        self.jobs.pop(key, None)

    def pending(self) -> List[str]:
        return list(self.jobs)

    def advance(self, delta: timedelta) -> None:
        target = self.clock.now + delta
        while True:
            due = [(when, key) for key, (when, _) in self.jobs.items() if when <= target]
            if not due:
                break
            when, key = min(due)
            _, callback = self.jobs.pop(key)
            self.clock.now = when
            callback()
        self.clock.now = target

    def advance_minutes(self, minutes: float) -> None:
        self.advance(timedelta(minutes=minutes))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timers(clock: FakeClock) -> FakeTimers:
    return FakeTimers(clock)


@pytest.fixture
def notifications() -> list:
    return []


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def ended() -> list:
    return []


@pytest.fixture
def tracker(timers, clock, notifications, session_factory, ended) -> SleepTracker:
    return SleepTracker(
        timers,
        notifications.append,
        session_factory=session_factory,
        clock=clock,
        on_session_end=ended.append,
    )


@pytest.fixture
def caregiver_id(tracker: SleepTracker) -> int:
    tracker.ensure_caregiver(1001, name="Ada", language="en")
    tracker.toggle_notifications(1001)
    return 1001
