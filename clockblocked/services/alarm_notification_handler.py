"""
Alarm notification handler: reacts to fired and tapped reminders.

Handling:
- First reminder of a burst -> pending challenge logged, window opened with
  a fresh phrase and its countdown started.
- Later reminders and taps -> the same pending challenge is reused and an
  already open window is left alone, so the phrase never changes.
- The tap that launched the process is handled the same way.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..core.app_state import AppState
from ..domain.repositories.alarm_repository import AlarmRepository
from .challenge_session import ChallengeSession
from .challenge_tracker import ChallengeTracker
from .notification_scheduler import NotificationScheduler
from .scheduler.base import NotificationBackend, ScheduledReminder

logger = logging.getLogger(__name__)


class AlarmNotificationHandler:
    def __init__(
        self,
        state: AppState,
        notifications: NotificationBackend,
        scheduler: NotificationScheduler,
        alarms: AlarmRepository,
        tracker: ChallengeTracker,
        session: ChallengeSession,
    ) -> None:
        self.state = state
        self.notifications = notifications
        self.scheduler = scheduler
        self.alarms = alarms
        self.tracker = tracker
        self.session = session
        self._removers: List[Callable[[], None]] = []

    @property
    def registered(self) -> bool:
        return bool(self._removers)

    async def initialize(self, user_id: Optional[str] = None) -> List[str]:
        """Load the user's alarms and rebuild the whole reminder registry.

        Errors are logged; the engine keeps running without reminders.
        """
        user_id = user_id or self.state.user_id
        if not user_id:
            return []
        try:
            alarms = await self.alarms.list_for_user(user_id)
            return await self.scheduler.reschedule_all(alarms)
        except Exception as e:
            logger.error(f"Error initializing alarms for user {user_id}: {e}")
            return []

    def register(self) -> None:
        """Start listening to delivered and tapped reminders."""
        if self._removers:
            return
        self._removers = [
            self.notifications.on_delivered(self._on_reminder),
            self.notifications.on_user_tapped(self._on_reminder),
        ]
        logger.debug("Alarm notification listeners registered")

    def unregister(self) -> None:
        for remove in self._removers:
            remove()
        self._removers = []
        logger.debug("Alarm notification listeners removed")

    async def _on_reminder(self, reminder: ScheduledReminder) -> None:
        await self.handle_reminder(reminder.payload)

    async def handle_reminder(self, payload: Optional[Dict[str, Any]]) -> Optional[str]:
        """Log the firing and open the challenge window if none is open.

        Returns the pending challenge ID, or None if the payload was ignored
        or handling failed.
        """
        alarm_id = (payload or {}).get("alarmId")
        user_id = self.state.user_id
        if not alarm_id or not user_id:
            logger.debug(f"Ignoring reminder payload {payload!r} (no alarm or no user)")
            return None

        try:
            challenge_id = await self.tracker.log_fired(user_id, alarm_id)

            if not self.state.has_active_challenge:
                self.session.open(alarm_id, challenge_id)
                self.session.start_countdown()
            return challenge_id
        except Exception as e:
            logger.error(f"Error handling alarm reminder for {alarm_id}: {e}")
            return None

    async def handle_launch_tap(self) -> Optional[str]:
        """Handle the reminder tap that launched this process, if any."""
        payload = await self.notifications.get_launch_tap()
        if payload is None:
            return None
        logger.info(f"Process launched from reminder for alarm {payload.get('alarmId')}")
        return await self.handle_reminder(payload)
