"""Game events for the event system."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of game events."""

    # League events
    GAME_INITIALIZED = auto()
    POOL_FUNDED = auto()
    ENTRY_FEE_PAID = auto()
    SCORE_SUBMITTED = auto()
    LEADERBOARD_FINALIZED = auto()
    PRIZE_CLAIMED = auto()

    # Randomness events
    RANDOMNESS_REQUESTED = auto()
    RANDOMNESS_RECEIVED = auto()

    # Round events
    ROUND_STARTED = auto()
    BET_PLACED = auto()
    GAME_OVER = auto()
    DAILY_COUNT_RESET = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable game event.

    Events are the audit trail of every committed state change.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type.name,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Event emitter for game events.

    Handlers subscribe to one event type, or to all events with ``None``.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._event_history: list[GameEvent] = []

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """Record an event and deliver it to type-specific, then catch-all handlers."""
        self._event_history.append(event)

        for handler in self._handlers.get(event.event_type, []):
            handler(event)
        for handler in self._handlers.get(None, []):
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Create and emit a new event."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return the event history."""
        return self._event_history.copy()

    def clear_history(self) -> None:
        self._event_history.clear()
