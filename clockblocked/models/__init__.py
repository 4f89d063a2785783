from .alarm import Alarm
from .alarm_sent_out import AlarmSentOut
from .base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "Alarm",
    "AlarmSentOut",
]
