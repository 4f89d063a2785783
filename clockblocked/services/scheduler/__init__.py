"""
Local notification scheduling for alarm reminders.

Provides:
- NotificationBackend ABC for device-local reminder registries
- ScheduledReminder describing one one-shot reminder
- APSchedulerNotificationCenter backed by APScheduler
"""

from .apscheduler_backend import APSchedulerNotificationCenter
from .base import NotificationBackend, ScheduledReminder

__all__ = [
    "NotificationBackend",
    "ScheduledReminder",
    "APSchedulerNotificationCenter",
]
