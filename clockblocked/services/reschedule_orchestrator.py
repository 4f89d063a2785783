"""
Reschedule orchestrator: re-arms an alarm after its challenge resolves.

Cancels whatever is left of the current burst, then schedules the burst for
the next occurrence if the alarm still exists and is enabled.
"""

import logging
from typing import List

from ..domain.repositories.alarm_repository import AlarmRepository
from .notification_scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


class RescheduleOrchestrator:
    """Cancel-then-schedule for a single alarm."""

    def __init__(
        self,
        alarms: AlarmRepository,
        scheduler: NotificationScheduler,
    ) -> None:
        self.alarms = alarms
        self.scheduler = scheduler

    async def reschedule(self, alarm_id: str) -> List[str]:
        """Cancel the alarm's outstanding reminders and arm the next occurrence.

        A deleted or disabled alarm is left unscheduled. Failure to load the
        alarm is logged and yields an empty result; the next startup
        reschedules every alarm anyway.
        """
        await self.scheduler.cancel_occurrence(alarm_id)

        try:
            alarm = await self.alarms.get(alarm_id)
        except Exception as e:
            logger.error(f"Error loading alarm {alarm_id} for rescheduling: {e}")
            return []

        if alarm is None:
            logger.info(f"Alarm {alarm_id} no longer exists, not rescheduling")
            return []
        if not alarm.is_enabled:
            logger.info(f"Alarm {alarm_id} is disabled, not rescheduling")
            return []

        logger.info(f"Rescheduling next occurrence for alarm {alarm_id}")
        return await self.scheduler.schedule_occurrence(alarm)
