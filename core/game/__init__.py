"""Player sessions, the league table, and their events."""

from core.game.events import GameEvent, EventType
from core.game.state import RoundState
from core.game.session import PlayerSession, RandomnessSlot
from core.game.table import GameTable

__all__ = [
    "GameEvent",
    "EventType",
    "RoundState",
    "PlayerSession",
    "RandomnessSlot",
    "GameTable",
]
