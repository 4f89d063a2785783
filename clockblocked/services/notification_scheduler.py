"""
Notification scheduler: turns an alarm occurrence into a burst of local
reminders and cancels them again.

Every alarm occurrence is a burst of ``repeats`` one-shot reminders spaced
``interval_seconds`` apart. Reminder identifiers are derived from the alarm
ID and the repeat index, so a burst can be cancelled without bookkeeping.
This is the only component that talks to the notification backend.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from ..core.config import Settings, get_settings
from .scheduler.base import NotificationBackend, ScheduledReminder
from .time_resolver import next_occurrence

logger = logging.getLogger(__name__)

DEFAULT_REPEATS = 10
DEFAULT_INTERVAL_SECONDS = 17.5
DEFAULT_TITLE = "ClockBlocked Alarm"
DEFAULT_SOUND = "alarm.wav"
FIRST_BODY = "Wake Up And Conquer Constantinople!"


def reminder_id(alarm_id: str, index: int) -> str:
    """Deterministic reminder identifier for one repeat of an alarm burst."""
    return f"alarm-{alarm_id}-{index}"


class NotificationScheduler:
    """Schedules and cancels reminder bursts on a NotificationBackend."""

    def __init__(
        self,
        notifications: NotificationBackend,
        repeats: int = DEFAULT_REPEATS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        title: str = DEFAULT_TITLE,
        sound: Optional[str] = DEFAULT_SOUND,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if repeats < 1:
            raise ValueError("repeats must be at least 1")
        self.notifications = notifications
        self.repeats = repeats
        self.interval = timedelta(seconds=interval_seconds)
        self.title = title
        self.sound = sound
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        notifications: NotificationBackend,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "NotificationScheduler":
        settings = settings or get_settings()
        return cls(
            notifications,
            repeats=settings.notification_repeats,
            interval_seconds=settings.repeat_interval_seconds,
            title=settings.notification_title,
            sound=settings.notification_sound,
            clock=clock,
        )

    def _body(self, index: int) -> str:
        if index == 0:
            return FIRST_BODY
        return f"Still sleeping? Wake up! ({index + 1}/{self.repeats})"

    async def schedule_occurrence(self, alarm) -> List[str]:
        """Schedule the burst for the alarm's next occurrence.

        Disabled alarms and alarms with no resolvable occurrence schedule
        nothing and return an empty list.
        """
        if not alarm.is_enabled:
            logger.debug(f"Alarm {alarm.id} is disabled, nothing to schedule")
            return []

        base = next_occurrence(alarm, self._clock())
        if base is None:
            logger.warning(f"Could not calculate next occurrence for alarm {alarm.id}")
            return []

        return await self.schedule_burst(alarm.id, base)

    async def schedule_burst(self, alarm_id: str, base: datetime) -> List[str]:
        """Register ``repeats`` reminders at ``base + i * interval``.

        Reminders that would fire at or before the current time are skipped.
        A failure to register one reminder does not stop the others.
        """
        now = self._clock()
        scheduled: List[str] = []

        for index in range(self.repeats):
            fire_at = base + index * self.interval
            if fire_at <= now:
                continue

            identifier = reminder_id(alarm_id, index)
            reminder = ScheduledReminder(
                identifier=identifier,
                fire_at=fire_at,
                payload={
                    "type": "alarm",
                    "alarmId": alarm_id,
                    "occurrence": base.isoformat(),
                    "repeatIndex": index,
                },
                title=self.title,
                body=self._body(index),
                sound=self.sound,
            )
            try:
                await self.notifications.schedule_at(reminder)
            except Exception as e:
                logger.error(f"Error scheduling reminder {identifier}: {e}")
                continue

            scheduled.append(identifier)
            logger.debug(f"Scheduled reminder {identifier} for {fire_at}")

        logger.info(f"Scheduled {len(scheduled)} reminders for alarm {alarm_id} at {base}")
        return scheduled

    async def cancel_occurrence(self, alarm_id: str) -> None:
        """Cancel every reminder of the alarm's burst.

        Missing or already fired reminders are expected and only logged.
        """
        for index in range(self.repeats):
            identifier = reminder_id(alarm_id, index)
            try:
                await self.notifications.cancel(identifier)
                logger.debug(f"Cancelled reminder {identifier}")
            except Exception as e:
                logger.debug(f"Could not cancel reminder {identifier}: {e}")

    async def reschedule_all(self, alarms: Iterable) -> List[str]:
        """Clear the whole registry, then schedule every enabled alarm."""
        await self.notifications.cancel_all()

        enabled = [alarm for alarm in alarms if alarm.is_enabled]
        scheduled: List[str] = []
        for alarm in enabled:
            scheduled.extend(await self.schedule_occurrence(alarm))

        logger.info(f"Rescheduled reminders for {len(enabled)} enabled alarms")
        return scheduled
