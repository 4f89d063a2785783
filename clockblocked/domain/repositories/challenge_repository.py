"""ChallengeRepository protocol: defines challenge persistence contract."""

from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable

from ..documents import ChallengeDocument, ChallengeStatus


@runtime_checkable
class ChallengeRepository(Protocol):
    """Repository interface for AlarmSentOut (challenge) access."""

    async def get(self, challenge_id: str) -> Optional[ChallengeDocument]:
        """Look up a challenge by ID, or None if it does not exist."""
        ...

    async def create_pending(self, user_id: str, alarm_id: str, sent_at: datetime) -> str:
        """Insert a new pending challenge and return its ID."""
        ...

    async def find_pending(self, user_id: str, alarm_id: str) -> List[ChallengeDocument]:
        """Get pending challenges for one (user, alarm) pair."""
        ...

    async def list_pending_for_user(self, user_id: str) -> List[ChallengeDocument]:
        """Get all pending challenges of a user, most recent ``sentAt`` first."""
        ...

    async def resolve(
        self,
        challenge_id: str,
        status: ChallengeStatus,
        completed_at: datetime,
        attempts_made: int,
    ) -> None:
        """Write the terminal status, completion time and attempt count.

        Raises:
            ChallengeNotFound: If the challenge does not exist.
        """
        ...
