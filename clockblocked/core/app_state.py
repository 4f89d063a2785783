"""
Application state: the single source of truth for the signed-in user
and the challenge window that is currently open.

One instance is created by the lifecycle and injected into the challenge
session, the notification handler and session recovery.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class ActiveChallenge:
    """The open challenge window. The phrase lives only here."""

    alarm_id: str
    challenge_id: str
    phrase: str
    started_at: datetime
    attempts: int = 0


class AppState:
    """Holds the signed-in user and at most one active challenge."""

    def __init__(self) -> None:
        self.user_id: Optional[str] = None
        self.active_challenge: Optional[ActiveChallenge] = None

    @property
    def has_active_challenge(self) -> bool:
        return self.active_challenge is not None

    def set_user(self, user_id: Optional[str]) -> None:
        self.user_id = user_id
        logger.info(f"Signed-in user set to {user_id}")

    def set_active_challenge(self, challenge: ActiveChallenge) -> None:
        self.active_challenge = challenge
        logger.info(
            f"Challenge window opened for alarm {challenge.alarm_id} "
            f"(challenge {challenge.challenge_id})"
        )

    def clear_active_challenge(self, challenge_id: Optional[str] = None) -> None:
        """Close the challenge window.

        When *challenge_id* is given, only that challenge is cleared; a
        different active challenge is left alone.
        """
        if self.active_challenge is None:
            return
        if challenge_id is not None and self.active_challenge.challenge_id != challenge_id:
            return
        logger.info(f"Challenge window closed ({self.active_challenge.challenge_id})")
        self.active_challenge = None

    def reset(self) -> None:
        """Forget the user and any open challenge (logout)."""
        self.user_id = None
        self.active_challenge = None
        logger.info("Application state reset")
