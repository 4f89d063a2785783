from .document_alarm_repository import DocumentAlarmRepository
from .document_challenge_repository import DocumentChallengeRepository

__all__ = ["DocumentAlarmRepository", "DocumentChallengeRepository"]
