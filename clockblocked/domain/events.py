"""Domain events for the challenge lifecycle.

Defines event types and a lightweight async EventBus for decoupled
communication between the tracker, the challenge window and app state.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Coroutine, Dict, List, Type

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Event types
# ---------------------------------------------------------------------------


@dataclass
class ChallengeOpened:
    """Emitted when a new pending challenge record is created."""

    challenge_id: str
    user_id: str
    alarm_id: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ChallengeResolved:
    """Emitted after a challenge reaches a terminal status."""

    challenge_id: str
    alarm_id: str
    status: str
    attempts_made: int
    timestamp: datetime = field(default_factory=datetime.now)


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------

EventHandler = Callable[[Any], Coroutine[Any, Any, None]]


class EventBus:
    """Simple in-process async event bus.

    A failing handler logs the error but does not prevent remaining
    handlers from running.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Type, List[EventHandler]] = {}

    def subscribe(self, event_type: Type, handler: EventHandler) -> None:
        """Register *handler* for *event_type*."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Type, handler: EventHandler) -> None:
        """Remove *handler* if registered; unknown handlers are ignored."""
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: Any) -> None:
        """Dispatch *event* to all registered handlers for its type."""
        handlers = list(self._subscribers.get(type(event), []))
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "Event handler %s failed for %s",
                    getattr(handler, "__name__", handler),
                    type(event).__name__,
                )
