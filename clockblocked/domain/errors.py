"""
Typed domain errors for the alarm engine.

Callers can distinguish decode failures from missing records and from
illegal challenge transitions, and map each to an appropriate response.
"""

from typing import Any, Optional


class DomainError(Exception):
    """Base class for all domain-specific errors."""


# ---------------------------------------------------------------------------
# Document store boundary
# ---------------------------------------------------------------------------


class UnknownCollection(DomainError):
    """The document store has no mapping for the requested collection."""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"Unknown collection: {collection}")


class DocumentNotFound(DomainError):
    """A document with the given ID does not exist in the collection."""

    def __init__(self, collection: str, document_id: str) -> None:
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found in {collection}")


class DocumentDecodeError(DomainError):
    """A stored document does not match its collection schema."""

    def __init__(
        self, collection: str, document_id: Optional[str], details: Any = None
    ) -> None:
        self.collection = collection
        self.document_id = document_id
        self.details = details
        super().__init__(
            f"Invalid document {document_id} in {collection}: {details}"
        )


# ---------------------------------------------------------------------------
# Alarms
# ---------------------------------------------------------------------------


class AlarmNotFound(DomainError):
    """Alarm with the given ID does not exist."""

    def __init__(self, alarm_id: str) -> None:
        self.alarm_id = alarm_id
        super().__init__(f"Alarm {alarm_id} not found")


class InvalidAlarmDefinition(DomainError, ValueError):
    """Hours, minutes or weekdays are out of range."""


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


class ChallengeNotFound(DomainError):
    """Challenge with the given ID does not exist."""

    def __init__(self, challenge_id: str) -> None:
        self.challenge_id = challenge_id
        super().__init__(f"Challenge {challenge_id} not found")


class ChallengeAlreadyResolved(DomainError):
    """A terminal challenge cannot change status again."""

    def __init__(self, challenge_id: str, status: str) -> None:
        self.challenge_id = challenge_id
        self.status = status
        super().__init__(f"Challenge {challenge_id} is already {status}")


class NoActiveChallenge(DomainError):
    """A challenge operation was requested while no challenge window is open."""


class SpeechCaptureFailure(DomainError):
    """Speech capture failed or produced no transcription."""
