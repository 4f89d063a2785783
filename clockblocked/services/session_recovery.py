"""
Session recovery: reopens an interrupted challenge after a restart.

Runs once per process start, after the user is known. The countdown origin
is the challenge's original ``sentAt``, so time spent before the restart
still counts against the window. No challenge record is created.
"""

import logging
from typing import Optional

from ..core.app_state import ActiveChallenge, AppState
from .challenge_session import ChallengeSession
from .challenge_tracker import ChallengeTracker

logger = logging.getLogger(__name__)


class SessionRecovery:
    def __init__(
        self,
        state: AppState,
        tracker: ChallengeTracker,
        session: ChallengeSession,
    ) -> None:
        self.state = state
        self.tracker = tracker
        self.session = session

    async def recover(self, user_id: Optional[str] = None) -> Optional[ActiveChallenge]:
        """Restore the user's most recent pending challenge, if any.

        Returns the reopened challenge, or None when there is nothing to
        recover or a window is already open.
        """
        user_id = user_id or self.state.user_id
        if not user_id:
            logger.debug("No signed-in user, skipping session recovery")
            return None
        if self.state.has_active_challenge:
            logger.debug("Challenge window already open, skipping session recovery")
            return None

        pending = await self.tracker.get_pending(user_id)
        if pending is None:
            return None

        challenge = self.session.open(
            pending.alarm_id, pending.id, started_at=pending.sent_at
        )
        logger.info(
            f"Recovered pending challenge {pending.id} for alarm {pending.alarm_id}, "
            f"{self.session.countdown_text()} remaining"
        )
        self.session.start_countdown()
        return challenge
