"""
Alarm engine lifespan management.

Wires the alarm engine for one signed-in user and handles startup and
shutdown of its subsystems:
- Database initialization
- Notification backend
- Reminder listeners and full reschedule of the user's alarms
- Recovery of a challenge interrupted by a restart
- The reminder tap that launched the process
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable, Optional

from .core.app_state import ActiveChallenge, AppState
from .core.config import Settings, get_settings
from .core.database import close_database, init_database
from .domain.events import ChallengeResolved, EventBus
from .domain.ports.document_store import DocumentStore
from .infrastructure.document_store import SqlAlchemyDocumentStore
from .infrastructure.repositories import (
    DocumentAlarmRepository,
    DocumentChallengeRepository,
)
from .services.alarm_notification_handler import AlarmNotificationHandler
from .services.alarm_service import AlarmService
from .services.challenge_session import ChallengeSession
from .services.challenge_tracker import ChallengeTracker
from .services.notification_scheduler import NotificationScheduler
from .services.reschedule_orchestrator import RescheduleOrchestrator
from .services.scheduler import APSchedulerNotificationCenter, NotificationBackend
from .services.session_recovery import SessionRecovery
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


class AlarmEngine:
    """All alarm engine services composed over one store and one backend."""

    def __init__(
        self,
        store: DocumentStore,
        notifications: NotificationBackend,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.notifications = notifications
        self.state = AppState()
        self.event_bus = event_bus or EventBus()

        self.alarm_repository = DocumentAlarmRepository(store)
        self.challenge_repository = DocumentChallengeRepository(store)

        self.scheduler = NotificationScheduler.from_settings(
            notifications, self.settings, clock=clock
        )
        self.orchestrator = RescheduleOrchestrator(self.alarm_repository, self.scheduler)
        self.tracker = ChallengeTracker(
            self.challenge_repository, self.orchestrator, self.event_bus, clock=clock
        )
        self.session = ChallengeSession.from_settings(
            self.state, self.tracker, self.settings, clock=clock
        )
        self.recovery = SessionRecovery(self.state, self.tracker, self.session)
        self.alarm_service = AlarmService(self.alarm_repository, self.scheduler, clock=clock)
        self.handler = AlarmNotificationHandler(
            self.state,
            notifications,
            self.scheduler,
            self.alarm_repository,
            self.tracker,
            self.session,
        )

        self.event_bus.subscribe(ChallengeResolved, self._on_challenge_resolved)

    async def _on_challenge_resolved(self, event: ChallengeResolved) -> None:
        self.state.clear_active_challenge(event.challenge_id)

    async def start(self, user_id: str) -> Optional[ActiveChallenge]:
        """Bring the engine up for *user_id*.

        Returns the recovered challenge window, if one was reopened.
        """
        logger.info(f"Starting alarm engine for user {user_id}")
        self.state.set_user(user_id)
        self.handler.register()

        scheduled = await self.handler.initialize(user_id)
        logger.info(f"Startup reschedule registered {len(scheduled)} reminders")

        recovered = None
        try:
            recovered = await self.recovery.recover(user_id)
        except Exception as e:
            logger.error(f"Session recovery failed for user {user_id}: {e}")

        await self.handler.handle_launch_tap()
        return recovered

    async def logout(self) -> None:
        """Close any open challenge window and forget the user."""
        await self.session.close()
        self.handler.unregister()
        self.state.reset()
        logger.info("Alarm engine logged out")


@asynccontextmanager
async def engine_lifespan(
    user_id: str,
    settings: Optional[Settings] = None,
    notifications: Optional[NotificationBackend] = None,
) -> AsyncIterator[AlarmEngine]:
    """Run the alarm engine for *user_id* for the duration of the block."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_to_file, settings.logs_dir)
    logger.info("ClockBlocked alarm engine starting up...")

    try:
        await init_database(settings.database_url)
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    notifications = notifications or APSchedulerNotificationCenter()
    await notifications.start()

    engine = AlarmEngine(SqlAlchemyDocumentStore(), notifications, settings)
    try:
        await engine.start(user_id)
        yield engine
    finally:
        logger.info("ClockBlocked alarm engine shutting down...")
        await engine.logout()
        await notifications.stop()
        await close_database()
