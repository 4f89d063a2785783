"""
Challenge tracker: persistence of the alarm challenge lifecycle.

Flow:
1. First reminder of a burst fires -> a ``pending`` challenge is logged.
2. Later reminders of the same burst reuse the pending challenge.
3. Correct phrase -> ``success``; countdown expiry -> ``failed``.
4. Either resolution re-arms the alarm for its next occurrence.

At most one challenge per (user, alarm) is pending. Terminal statuses are
final. Store failures propagate to the caller and are never retried.
"""

import asyncio
import logging
import weakref
from datetime import datetime
from typing import Callable, Optional, Tuple

from ..domain.documents import ChallengeDocument, ChallengeStatus
from ..domain.errors import ChallengeAlreadyResolved, ChallengeNotFound
from ..domain.events import ChallengeOpened, ChallengeResolved, EventBus
from ..domain.repositories.challenge_repository import ChallengeRepository
from ..utils.logging import log_challenge_event
from .reschedule_orchestrator import RescheduleOrchestrator

logger = logging.getLogger(__name__)


class ChallengeTracker:
    """Creates, looks up and resolves challenge records."""

    def __init__(
        self,
        challenges: ChallengeRepository,
        orchestrator: RescheduleOrchestrator,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.challenges = challenges
        self.orchestrator = orchestrator
        self.event_bus = event_bus or EventBus()
        self._clock = clock
        # Entries vanish once no coroutine holds or waits on the lock
        self._locks: "weakref.WeakValueDictionary[Tuple[str, ...], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, *key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def find_pending(self, user_id: str, alarm_id: str) -> Optional[str]:
        """Return the ID of the pending challenge for (user, alarm), if any."""
        pending = await self.challenges.find_pending(user_id, alarm_id)
        if not pending:
            return None
        if len(pending) > 1:
            logger.warning(
                f"{len(pending)} pending challenges for user {user_id} alarm {alarm_id}"
            )
        return max(pending, key=lambda challenge: challenge.sent_at).id

    async def log_fired(self, user_id: str, alarm_id: str) -> str:
        """Record that an alarm fired and return its pending challenge ID.

        Idempotent while a challenge is pending: every reminder of a burst
        maps to the same challenge. Concurrent calls for the same pair are
        serialized within this process.
        """
        async with self._lock_for(user_id, alarm_id):
            existing = await self.find_pending(user_id, alarm_id)
            if existing is not None:
                logger.info(f"Reusing pending challenge {existing} for alarm {alarm_id}")
                return existing

            sent_at = self._clock()
            challenge_id = await self.challenges.create_pending(user_id, alarm_id, sent_at)

        logger.info(f"Logged alarm {alarm_id} as sent out (challenge {challenge_id})")
        log_challenge_event("opened", challenge_id, alarm_id=alarm_id, user_id=user_id)
        await self.event_bus.publish(
            ChallengeOpened(
                challenge_id=challenge_id,
                user_id=user_id,
                alarm_id=alarm_id,
                timestamp=sent_at,
            )
        )
        return challenge_id

    async def resolve_success(
        self, challenge_id: str, attempts_made: int, alarm_id: str
    ) -> None:
        """Mark the challenge ``success`` and re-arm the alarm."""
        await self._resolve(challenge_id, ChallengeStatus.SUCCESS, attempts_made, alarm_id)

    async def resolve_failure(
        self, challenge_id: str, attempts_made: int, alarm_id: str
    ) -> None:
        """Mark the challenge ``failed`` and re-arm the alarm.

        Only the countdown expiry calls this; a wrong attempt never does.
        """
        await self._resolve(challenge_id, ChallengeStatus.FAILED, attempts_made, alarm_id)

    async def _resolve(
        self,
        challenge_id: str,
        status: ChallengeStatus,
        attempts_made: int,
        alarm_id: str,
    ) -> None:
        if attempts_made < 0:
            raise ValueError("attempts_made cannot be negative")

        async with self._lock_for("resolve", challenge_id):
            current = await self.challenges.get(challenge_id)
            if current is None:
                raise ChallengeNotFound(challenge_id)
            if current.challenge_status.is_terminal:
                raise ChallengeAlreadyResolved(challenge_id, current.challenge_status.value)

            completed_at = self._clock()
            await self.challenges.resolve(challenge_id, status, completed_at, attempts_made)

        logger.info(
            f"Challenge {challenge_id} for alarm {alarm_id} resolved as "
            f"{status.value} after {attempts_made} attempts"
        )
        log_challenge_event(
            status.value, challenge_id, alarm_id=alarm_id, attempts_made=attempts_made
        )
        await self.event_bus.publish(
            ChallengeResolved(
                challenge_id=challenge_id,
                alarm_id=alarm_id,
                status=status.value,
                attempts_made=attempts_made,
                timestamp=completed_at,
            )
        )

        await self.orchestrator.reschedule(alarm_id)

    async def get_pending(self, user_id: str) -> Optional[ChallengeDocument]:
        """Return the user's most recent pending challenge, if any."""
        pending = await self.challenges.list_pending_for_user(user_id)
        return pending[0] if pending else None
