"""
Local notification base types and abstract backend.

ScheduledReminder describes one one-shot reminder and when it fires.
NotificationBackend is the ABC for device-local registries
(e.g. APSchedulerNotificationCenter). It owns listener bookkeeping so
concrete backends only implement scheduling and cancellation.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ScheduledReminder:
    """Describes a local reminder to be delivered at ``fire_at``.

    ``fire_at`` is a device-local wall-clock datetime (naive).
    ``payload`` must carry at least ``alarmId``.
    """

    identifier: str
    fire_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)
    title: str = ""
    body: str = ""
    sound: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.identifier:
            raise ValueError("identifier required for a reminder")
        if not isinstance(self.fire_at, datetime):
            raise ValueError("fire_at must be a datetime")
        if not self.payload.get("alarmId"):
            raise ValueError("payload must carry alarmId")

    @property
    def alarm_id(self) -> str:
        return self.payload["alarmId"]


ReminderCallback = Callable[[ScheduledReminder], Awaitable[None]]


class NotificationBackend(ABC):
    """ABC for the process-wide local notification registry."""

    def __init__(self) -> None:
        self._delivered_listeners: List[ReminderCallback] = []
        self._tapped_listeners: List[ReminderCallback] = []
        self._launch_tap: Optional[Dict[str, Any]] = None

    @abstractmethod
    async def schedule_at(self, reminder: ScheduledReminder) -> None:
        """Register *reminder* to fire at ``reminder.fire_at``."""

    @abstractmethod
    async def cancel(self, identifier: str) -> None:
        """Cancel one reminder. May raise for unknown or already-fired IDs."""

    @abstractmethod
    async def cancel_all(self) -> None:
        """Cancel every scheduled reminder."""

    @abstractmethod
    def list_scheduled(self) -> List[str]:
        """Return identifiers of all pending reminders."""

    @abstractmethod
    async def start(self) -> None:
        """Start delivering reminders."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering reminders."""

    # -- Listeners --

    def on_delivered(self, callback: ReminderCallback) -> Callable[[], None]:
        """Call *callback* whenever a reminder fires. Returns a remover."""
        return self._add_listener(self._delivered_listeners, callback)

    def on_user_tapped(self, callback: ReminderCallback) -> Callable[[], None]:
        """Call *callback* whenever the user taps a reminder. Returns a remover."""
        return self._add_listener(self._tapped_listeners, callback)

    @staticmethod
    def _add_listener(
        listeners: List[ReminderCallback], callback: ReminderCallback
    ) -> Callable[[], None]:
        listeners.append(callback)

        def remove() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return remove

    async def _dispatch(
        self, listeners: List[ReminderCallback], reminder: ScheduledReminder
    ) -> None:
        for callback in list(listeners):
            try:
                await callback(reminder)
            except Exception:
                logger.exception(
                    "Reminder listener %s failed for %s",
                    getattr(callback, "__name__", callback),
                    reminder.identifier,
                )

    async def tap(self, reminder: ScheduledReminder) -> None:
        """Report a user tap on *reminder* to the tapped listeners."""
        await self._dispatch(self._tapped_listeners, reminder)

    # -- Launch tap --

    def set_launch_tap(self, payload: Optional[Dict[str, Any]]) -> None:
        """Record the payload of the tap that launched this process."""
        self._launch_tap = payload

    async def get_launch_tap(self) -> Optional[Dict[str, Any]]:
        """Return (and consume) the launch tap payload, if any."""
        payload, self._launch_tap = self._launch_tap, None
        return payload
