"""Explicit schemas for the two document collections.

Documents travel through the store as plain dicts keyed by their wire field
names (``userId``, ``selectedDays`` ...). They are decoded here, at the store
boundary, so a malformed document fails with DocumentDecodeError instead of
being patched up with defaults.
"""

import enum
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import DocumentDecodeError

ALARMS_COLLECTION = "alarms"
ALARMS_SENT_OUT_COLLECTION = "alarms_sent_out"


class ChallengeStatus(str, enum.Enum):
    """Challenge lifecycle status. Only PENDING is non-terminal."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ChallengeStatus.PENDING


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    COLLECTION: ClassVar[str] = ""

    @classmethod
    def decode(cls, document: Dict[str, Any]):
        """Validate a raw store document, raising DocumentDecodeError on mismatch."""
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            raise DocumentDecodeError(
                cls.COLLECTION,
                document.get("id") if isinstance(document, dict) else None,
                e.errors(include_url=False),
            ) from e

    def to_fields(self) -> Dict[str, Any]:
        """Serialize back to wire field names, without the id."""
        return self.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)


class AlarmDocument(_Document):
    """Alarm as stored in the ``alarms`` collection."""

    COLLECTION: ClassVar[str] = ALARMS_COLLECTION

    id: str
    user_id: str = Field(alias="userId", min_length=1)
    hours: int = Field(ge=0, le=23)
    minutes: int = Field(ge=0, le=59)
    selected_days: List[int] = Field(alias="selectedDays")
    is_enabled: bool = Field(alias="isEnabled")
    created_at: datetime = Field(alias="createdAt")

    @field_validator("selected_days")
    @classmethod
    def _check_days(cls, days: List[int]) -> List[int]:
        for day in days:
            if not 0 <= day <= 6:
                raise ValueError(f"weekday {day} outside 0..6")
        return sorted(set(days))


class ChallengeDocument(_Document):
    """Challenge (alarm sent out) as stored in ``alarms_sent_out``."""

    COLLECTION: ClassVar[str] = ALARMS_SENT_OUT_COLLECTION

    id: str
    user_id: str = Field(alias="userId", min_length=1)
    alarm_id: str = Field(alias="alarmId", min_length=1)
    sent_at: datetime = Field(alias="sentAt")
    challenge_status: ChallengeStatus = Field(alias="challengeStatus")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    attempts_made: Optional[int] = Field(default=None, alias="attemptsMade", ge=0)

    @model_validator(mode="after")
    def _check_resolution_fields(self) -> "ChallengeDocument":
        if self.challenge_status.is_terminal:
            if self.completed_at is None:
                raise ValueError("terminal challenge requires completedAt")
        elif self.completed_at is not None or self.attempts_made is not None:
            raise ValueError("pending challenge cannot carry completedAt/attemptsMade")
        return self
