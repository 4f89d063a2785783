"""Tests for the APScheduler-backed notification center."""

import asyncio
from datetime import datetime, timedelta

import pytest
from apscheduler.jobstores.base import JobLookupError

from clockblocked.services.scheduler import APSchedulerNotificationCenter, ScheduledReminder


def _reminder(identifier="alarm-a1-0", seconds=3600, alarm_id="a1"):
    return ScheduledReminder(
        identifier=identifier,
        fire_at=datetime.now() + timedelta(seconds=seconds),
        payload={"type": "alarm", "alarmId": alarm_id, "repeatIndex": 0},
        title="ClockBlocked Alarm",
    )


@pytest.fixture
async def center():
    backend = APSchedulerNotificationCenter()
    await backend.start()
    yield backend
    await backend.stop()


class TestScheduledReminder:
    def test_requires_identifier(self):
        with pytest.raises(ValueError, match="identifier"):
            ScheduledReminder(identifier="", fire_at=datetime.now(), payload={"alarmId": "a"})

    def test_requires_alarm_id(self):
        with pytest.raises(ValueError, match="alarmId"):
            ScheduledReminder(identifier="x", fire_at=datetime.now(), payload={})

    def test_requires_datetime(self):
        with pytest.raises(ValueError, match="fire_at"):
            ScheduledReminder(identifier="x", fire_at="soon", payload={"alarmId": "a"})

    def test_alarm_id_property(self):
        assert _reminder(alarm_id="xyz").alarm_id == "xyz"


class TestAPSchedulerNotificationCenter:
    async def test_schedule_and_list(self, center):
        await center.schedule_at(_reminder("alarm-a1-0"))
        await center.schedule_at(_reminder("alarm-a1-1", seconds=3700))

        assert sorted(center.list_scheduled()) == ["alarm-a1-0", "alarm-a1-1"]

    async def test_same_identifier_replaces(self, center):
        await center.schedule_at(_reminder("alarm-a1-0"))
        await center.schedule_at(_reminder("alarm-a1-0", seconds=7200))

        assert center.list_scheduled() == ["alarm-a1-0"]

    async def test_cancel(self, center):
        await center.schedule_at(_reminder("alarm-a1-0"))

        await center.cancel("alarm-a1-0")

        assert center.list_scheduled() == []

    async def test_cancel_unknown_raises(self, center):
        with pytest.raises(JobLookupError):
            await center.cancel("alarm-never-0")

    async def test_cancel_all(self, center):
        await center.schedule_at(_reminder("alarm-a1-0"))
        await center.schedule_at(_reminder("alarm-a2-0", alarm_id="a2"))

        await center.cancel_all()

        assert center.list_scheduled() == []

    async def test_due_reminder_is_delivered(self, center):
        delivered = asyncio.Event()
        received = []

        async def on_delivered(reminder):
            received.append(reminder)
            delivered.set()

        center.on_delivered(on_delivered)
        await center.schedule_at(_reminder("alarm-a1-0", seconds=0.2))

        await asyncio.wait_for(delivered.wait(), timeout=5)

        assert received[0].payload["alarmId"] == "a1"
        assert center.list_scheduled() == []

    async def test_removed_listener_is_not_called(self, center):
        calls = []

        async def on_tapped(reminder):
            calls.append(reminder)

        remove = center.on_user_tapped(on_tapped)
        remove()
        await center.tap(_reminder())

        assert calls == []

    async def test_failing_listener_does_not_block_others(self, center):
        calls = []

        async def broken(reminder):
            raise RuntimeError("listener bug")

        async def healthy(reminder):
            calls.append(reminder)

        center.on_user_tapped(broken)
        center.on_user_tapped(healthy)
        await center.tap(_reminder())

        assert len(calls) == 1

    async def test_launch_tap_is_consumed(self, center):
        center.set_launch_tap({"alarmId": "a1"})

        assert await center.get_launch_tap() == {"alarmId": "a1"}
        assert await center.get_launch_tap() is None

    async def test_start_and_stop_are_idempotent(self):
        backend = APSchedulerNotificationCenter()
        await backend.start()
        await backend.start()
        await backend.stop()
        await backend.stop()
