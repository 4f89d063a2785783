"""
AlarmSentOut model: one verification challenge window per alarm occurrence.

Rows are append-only history. The parent alarm may be deleted while its
challenges remain, so alarm_id is a plain column rather than a foreign key.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .alarm import new_document_id
from .base import Base


class AlarmSentOut(Base):
    """A persisted challenge record (pending, success or failed)."""

    __tablename__ = "alarms_sent_out"
    __table_args__ = (
        Index("ix_alarms_sent_out_lookup", "user_id", "alarm_id", "challenge_status"),
    )

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=new_document_id
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    alarm_id: Mapped[str] = mapped_column(String(64), nullable=False)

    sent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    challenge_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending"
    )  # pending, success, failed

    # Set only on resolution
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    attempts_made: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AlarmSentOut(id={self.id}, alarm_id={self.alarm_id}, "
            f"status={self.challenge_status})>"
        )
