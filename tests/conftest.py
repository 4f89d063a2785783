import logging
import logging.handlers
import os
from datetime import datetime, timedelta
from typing import Dict, List

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_TO_FILE"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from clockblocked.core.config import Settings  # noqa: E402
from clockblocked.infrastructure.document_store import SqlAlchemyDocumentStore  # noqa: E402
from clockblocked.models.base import Base  # noqa: E402
from clockblocked.services.scheduler.base import (  # noqa: E402
    NotificationBackend,
    ScheduledReminder,
)

# Monday 2025-01-06 07:00 (alarm weekday 1)
MONDAY_7AM = datetime(2025, 1, 6, 7, 0)


@pytest.fixture(autouse=True)
def _strip_file_handlers():
    """Remove file handlers from root logger so tests never write to logs/app.log."""
    root = logging.getLogger()
    saved = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    for h in saved:
        root.removeHandler(h)
    yield
    # Restore any that were removed (and strip any new ones tests may have added)
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            root.removeHandler(h)
    for h in saved:
        root.addHandler(h)


class FakeClock:
    """Settable clock passed wherever services take ``clock=``."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeNotificationCenter(NotificationBackend):
    """In-memory notification registry.

    Cancelling an unknown identifier raises, like a real registry does for
    reminders that already fired.
    """

    def __init__(self, fail_on=()) -> None:
        super().__init__()
        self.scheduled: Dict[str, ScheduledReminder] = {}
        self.cancelled: List[str] = []
        self.cancel_all_calls = 0
        self.fail_on = set(fail_on)
        self.started = False

    async def schedule_at(self, reminder: ScheduledReminder) -> None:
        if reminder.identifier in self.fail_on:
            raise RuntimeError(f"registry refused {reminder.identifier}")
        self.scheduled[reminder.identifier] = reminder

    async def cancel(self, identifier: str) -> None:
        self.cancelled.append(identifier)
        if identifier not in self.scheduled:
            raise KeyError(identifier)
        del self.scheduled[identifier]

    async def cancel_all(self) -> None:
        self.cancel_all_calls += 1
        self.scheduled.clear()

    def list_scheduled(self) -> List[str]:
        return sorted(self.scheduled)

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.started = False

    async def fire(self, identifier: str) -> None:
        """Deliver a scheduled reminder as if its time had come."""
        reminder = self.scheduled.pop(identifier)
        await self._dispatch(self._delivered_listeners, reminder)


@pytest.fixture
def clock():
    return FakeClock(MONDAY_7AM)


@pytest.fixture
def notifications():
    return FakeNotificationCenter()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        log_to_file=False,
    )


@pytest.fixture
async def session_factory():
    """In-memory async SQLite with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def store(session_factory):
    return SqlAlchemyDocumentStore(session_factory)


@pytest.fixture
async def engine(store, notifications, settings, clock):
    """Fully wired alarm engine over the in-memory store."""
    from clockblocked.lifecycle import AlarmEngine

    alarm_engine = AlarmEngine(store, notifications, settings, clock=clock)
    yield alarm_engine
    await alarm_engine.session.close()
