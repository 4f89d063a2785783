from .alarm_repository import AlarmRepository, AlarmsCallback
from .challenge_repository import ChallengeRepository

__all__ = ["AlarmRepository", "AlarmsCallback", "ChallengeRepository"]
