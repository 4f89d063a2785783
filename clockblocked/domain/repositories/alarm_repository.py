"""AlarmRepository protocol: defines alarm persistence contract."""

from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, runtime_checkable

from ..documents import AlarmDocument

AlarmsCallback = Callable[[List[AlarmDocument]], Awaitable[None]]


@runtime_checkable
class AlarmRepository(Protocol):
    """Repository interface for Alarm entity access."""

    async def create(
        self,
        user_id: str,
        hours: int,
        minutes: int,
        selected_days: List[int],
        is_enabled: bool,
        created_at: datetime,
    ) -> AlarmDocument:
        """Persist a new alarm and return it with its assigned ID."""
        ...

    async def get(self, alarm_id: str) -> Optional[AlarmDocument]:
        """Look up an alarm by ID.

        Returns:
            The decoded alarm, or None if it does not exist.

        Raises:
            DocumentDecodeError: If the stored alarm is malformed.
        """
        ...

    async def list_for_user(self, user_id: str) -> List[AlarmDocument]:
        """Get all alarms of a user, newest ``createdAt`` first."""
        ...

    async def update(self, alarm_id: str, **fields: Any) -> None:
        """Update alarm attributes given by their Python names.

        Raises:
            AlarmNotFound: If the alarm does not exist.
        """
        ...

    async def delete(self, alarm_id: str) -> None:
        """Delete an alarm. Missing alarms are ignored."""
        ...

    async def subscribe_for_user(
        self, user_id: str, callback: AlarmsCallback
    ) -> Callable[[], None]:
        """Deliver the user's alarms now and on every change.

        Returns:
            A callable that stops delivery.
        """
        ...
