"""
Alarm service: alarm definitions and their scheduling side effects.

Every write that changes when an alarm fires also updates its reminders:
creating or enabling schedules the next occurrence, editing reschedules it,
disabling and deleting cancel it. Challenge records are never touched here;
deleting an alarm leaves its challenges in place.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..domain.documents import AlarmDocument
from ..domain.errors import AlarmNotFound, InvalidAlarmDefinition
from ..domain.repositories.alarm_repository import AlarmRepository, AlarmsCallback
from .notification_scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


def validate_alarm_definition(
    hours: int, minutes: int, selected_days: Iterable[int]
) -> List[int]:
    """Check an alarm's time and weekdays, returning the normalized day list.

    Raises:
        InvalidAlarmDefinition: If any value is out of range.
    """
    if not isinstance(hours, int) or isinstance(hours, bool) or not 0 <= hours <= 23:
        raise InvalidAlarmDefinition(f"hours must be in 0..23, got {hours!r}")
    if not isinstance(minutes, int) or isinstance(minutes, bool) or not 0 <= minutes <= 59:
        raise InvalidAlarmDefinition(f"minutes must be in 0..59, got {minutes!r}")

    days = list(selected_days)
    for day in days:
        if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
            raise InvalidAlarmDefinition(f"weekday must be in 0..6 (0=Sunday), got {day!r}")
    return sorted(set(days))


class AlarmService:
    """Alarm CRUD with reminder scheduling."""

    def __init__(
        self,
        alarms: AlarmRepository,
        scheduler: NotificationScheduler,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.alarms = alarms
        self.scheduler = scheduler
        self._clock = clock

    async def create_alarm(
        self,
        user_id: str,
        hours: int,
        minutes: int,
        selected_days: Iterable[int],
    ) -> AlarmDocument:
        """Create an enabled alarm and schedule its next occurrence."""
        if not user_id:
            raise InvalidAlarmDefinition("user_id is required")
        days = validate_alarm_definition(hours, minutes, selected_days)

        alarm = await self.alarms.create(
            user_id=user_id,
            hours=hours,
            minutes=minutes,
            selected_days=days,
            is_enabled=True,
            created_at=self._clock(),
        )
        logger.info(f"Created alarm {alarm.id} for user {user_id} at {hours:02d}:{minutes:02d}")

        await self.scheduler.schedule_occurrence(alarm)
        return alarm

    async def get_alarm(self, alarm_id: str) -> Optional[AlarmDocument]:
        return await self.alarms.get(alarm_id)

    async def get_user_alarms(self, user_id: str) -> List[AlarmDocument]:
        """All alarms of a user, newest first."""
        return await self.alarms.list_for_user(user_id)

    async def update_alarm(
        self,
        alarm_id: str,
        hours: int,
        minutes: int,
        selected_days: Iterable[int],
    ) -> AlarmDocument:
        """Change an alarm's time and weekdays, then reschedule it.

        Raises:
            AlarmNotFound: If the alarm does not exist.
        """
        days = validate_alarm_definition(hours, minutes, selected_days)
        await self.alarms.update(alarm_id, hours=hours, minutes=minutes, selected_days=days)

        await self.scheduler.cancel_occurrence(alarm_id)
        alarm = await self._require(alarm_id)
        if alarm.is_enabled:
            await self.scheduler.schedule_occurrence(alarm)
        return alarm

    async def set_enabled(self, alarm_id: str, is_enabled: bool) -> AlarmDocument:
        """Enable or disable an alarm.

        Enabling schedules the next occurrence; disabling cancels the
        outstanding reminders.
        """
        await self.alarms.update(alarm_id, is_enabled=is_enabled)
        alarm = await self._require(alarm_id)

        await self.scheduler.cancel_occurrence(alarm_id)
        if is_enabled:
            await self.scheduler.schedule_occurrence(alarm)
        logger.info(f"Alarm {alarm_id} {'enabled' if is_enabled else 'disabled'}")
        return alarm

    async def delete_alarm(self, alarm_id: str) -> None:
        """Cancel the alarm's reminders, then delete it."""
        await self.scheduler.cancel_occurrence(alarm_id)
        await self.alarms.delete(alarm_id)
        logger.info(f"Deleted alarm {alarm_id}")

    async def delete_user_alarms(self, user_id: str) -> int:
        """Delete every alarm of a user (account deletion). Returns the count."""
        alarms = await self.alarms.list_for_user(user_id)
        for alarm in alarms:
            await self.delete_alarm(alarm.id)
        logger.info(f"Deleted {len(alarms)} alarms for user {user_id}")
        return len(alarms)

    async def subscribe_to_user_alarms(
        self, user_id: str, callback: AlarmsCallback
    ) -> Callable[[], None]:
        """Deliver the user's alarms now and after every change.

        Returns:
            A callable that stops delivery.
        """
        if not user_id:
            logger.error("subscribe_to_user_alarms: user_id is required")
            return lambda: None
        return await self.alarms.subscribe_for_user(user_id, callback)

    async def _require(self, alarm_id: str) -> AlarmDocument:
        alarm = await self.alarms.get(alarm_id)
        if alarm is None:
            raise AlarmNotFound(alarm_id)
        return alarm
