"""
APSchedulerNotificationCenter: NotificationBackend backed by APScheduler.

Each reminder becomes one DateTrigger job whose job ID is the reminder
identifier, so cancellation needs no lookup table.
"""

import logging
from typing import Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from .base import NotificationBackend, ScheduledReminder

logger = logging.getLogger(__name__)


class APSchedulerNotificationCenter(NotificationBackend):
    """In-process local notification registry using an AsyncIOScheduler."""

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None) -> None:
        super().__init__()
        self._scheduler = scheduler or AsyncIOScheduler()
        self._reminders: Dict[str, ScheduledReminder] = {}

    async def schedule_at(self, reminder: ScheduledReminder) -> None:
        self._scheduler.add_job(
            self._deliver,
            trigger=DateTrigger(run_date=reminder.fire_at),
            args=[reminder.identifier],
            id=reminder.identifier,
            replace_existing=True,
            misfire_grace_time=None,
        )
        self._reminders[reminder.identifier] = reminder
        logger.debug("Registered reminder %s at %s", reminder.identifier, reminder.fire_at)

    async def cancel(self, identifier: str) -> None:
        self._reminders.pop(identifier, None)
        # Raises JobLookupError for unknown or already-fired IDs
        self._scheduler.remove_job(identifier)

    async def cancel_all(self) -> None:
        self._scheduler.remove_all_jobs()
        self._reminders.clear()
        logger.info("All local reminders cancelled")

    def list_scheduled(self) -> List[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    async def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Notification scheduler started")

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Notification scheduler stopped")

    async def _deliver(self, identifier: str) -> None:
        """Job callback: hand the fired reminder to delivered listeners."""
        reminder = self._reminders.pop(identifier, None)
        if reminder is None:
            logger.warning("Fired reminder %s is no longer tracked", identifier)
            return
        logger.info("Delivering reminder %s", identifier)
        await self._dispatch(self._delivered_listeners, reminder)


__all__ = ["APSchedulerNotificationCenter"]
