"""DocumentStore implementation of ChallengeRepository."""

import logging
from datetime import datetime
from typing import List, Optional

from ...domain.documents import (
    ALARMS_SENT_OUT_COLLECTION,
    ChallengeDocument,
    ChallengeStatus,
)
from ...domain.errors import ChallengeNotFound, DocumentNotFound
from ...domain.ports.document_store import DocumentStore

logger = logging.getLogger(__name__)


class DocumentChallengeRepository:
    """Concrete ChallengeRepository over a DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def get(self, challenge_id: str) -> Optional[ChallengeDocument]:
        document = await self._store.get(ALARMS_SENT_OUT_COLLECTION, challenge_id)
        return ChallengeDocument.decode(document) if document is not None else None

    async def create_pending(self, user_id: str, alarm_id: str, sent_at: datetime) -> str:
        return await self._store.create(
            ALARMS_SENT_OUT_COLLECTION,
            {
                "userId": user_id,
                "alarmId": alarm_id,
                "sentAt": sent_at,
                "challengeStatus": ChallengeStatus.PENDING.value,
            },
        )

    async def find_pending(self, user_id: str, alarm_id: str) -> List[ChallengeDocument]:
        documents = await self._store.query(
            ALARMS_SENT_OUT_COLLECTION,
            {
                "userId": user_id,
                "alarmId": alarm_id,
                "challengeStatus": ChallengeStatus.PENDING.value,
            },
        )
        return [ChallengeDocument.decode(document) for document in documents]

    async def list_pending_for_user(self, user_id: str) -> List[ChallengeDocument]:
        documents = await self._store.query(
            ALARMS_SENT_OUT_COLLECTION,
            {"userId": user_id, "challengeStatus": ChallengeStatus.PENDING.value},
        )
        challenges = [ChallengeDocument.decode(document) for document in documents]
        return sorted(challenges, key=lambda challenge: challenge.sent_at, reverse=True)

    async def resolve(
        self,
        challenge_id: str,
        status: ChallengeStatus,
        completed_at: datetime,
        attempts_made: int,
    ) -> None:
        try:
            await self._store.update(
                ALARMS_SENT_OUT_COLLECTION,
                challenge_id,
                {
                    "challengeStatus": ChallengeStatus(status).value,
                    "completedAt": completed_at,
                    "attemptsMade": attempts_made,
                },
            )
        except DocumentNotFound as e:
            raise ChallengeNotFound(challenge_id) from e
