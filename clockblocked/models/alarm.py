"""
Alarm model: a recurring wake-up definition owned by one user.
"""

import uuid
from typing import List

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


def new_document_id() -> str:
    """Generate an opaque store-assigned document identifier."""
    return uuid.uuid4().hex


class Alarm(Base, TimestampMixin):
    """A recurring alarm constrained to a set of weekdays (0=Sunday)."""

    __tablename__ = "alarms"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=new_document_id
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    # Wall-clock trigger time
    hours: Mapped[int] = mapped_column(Integer, nullable=False)
    minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    selected_days: Mapped[List[int]] = mapped_column(JSON, nullable=False, default=list)

    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Alarm(id={self.id}, user_id={self.user_id}, "
            f"time={self.hours:02d}:{self.minutes:02d}, enabled={self.is_enabled})>"
        )
