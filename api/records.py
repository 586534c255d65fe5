"""Persisted record layout for the league table and player sessions."""

import logging
from typing import Any

from fastapi import HTTPException

from api.storage import get_record_store, record_lock
from core.cards import Card, Deck, Rank, Suit
from core.game import GameTable, PlayerSession, RandomnessSlot, RoundState
from core.game.events import EventEmitter
from core.leaderboard import Finalized, Leaderboard, LeaderboardEntry, Open

logger = logging.getLogger(__name__)

TABLE_KEY = "league:table"
EVENT_LOG_KEY = "league:events"
EVENT_LOG_LIMIT = 1000  # most recent events kept


def session_key(player: str) -> str:
    return f"player:{player}"


def _serialize_card(card: Card) -> dict[str, Any]:
    """Serialize a card to a dict."""
    return {"suit": card.suit.value, "rank": card.rank.value}


def _deserialize_card(data: dict[str, Any]) -> Card:
    """Deserialize a card from a dict."""
    return Card(Rank(data["rank"]), Suit(data["suit"]))


def _serialize_entry(entry: LeaderboardEntry) -> dict[str, Any]:
    return {
        "player": entry.player,
        "score": entry.score,
        "submitted_seq": entry.submitted_seq,
    }


def _deserialize_entry(data: dict[str, Any]) -> LeaderboardEntry:
    return LeaderboardEntry(
        player=data["player"],
        score=data["score"],
        submitted_seq=data["submitted_seq"],
    )


def _serialize_table(table: GameTable) -> dict[str, Any]:
    """Serialize the league table; field order is part of the record layout."""
    return {
        "admin": table.admin,
        "entry_fee": table.entry_fee,
        "start_time": table.window_start,
        "end_time": table.window_end,
        "leaderboard_size": table.leaderboard_capacity,
        "leaderboard": [_serialize_entry(e) for e in table.leaderboard.entries],
        "finalized": table.finalized,
        "finalized_timestamp": table.finalized_at if table.finalized_at is not None else 0,
        "pool": table.pool,
        "prize_pool": table.prize_pool,
        "claimed": sorted(table.claimed),
    }


def _deserialize_table(data: dict[str, Any]) -> GameTable:
    """Restore the league table from its record."""
    finalization = Finalized(at=data["finalized_timestamp"]) if data["finalized"] else Open()
    leaderboard = Leaderboard(
        capacity=data["leaderboard_size"],
        entries=[_deserialize_entry(e) for e in data["leaderboard"]],
        finalization=finalization,
    )
    return GameTable(
        admin=data["admin"],
        entry_fee=data["entry_fee"],
        window_start=data["start_time"],
        window_end=data["end_time"],
        leaderboard=leaderboard,
        pool=data["pool"],
        prize_pool=data.get("prize_pool", 0),
        claimed=data.get("claimed", []),
    )


def _serialize_session(session: PlayerSession) -> dict[str, Any]:
    """Serialize a player session."""
    return {
        "player": session.player,
        "game_id": session.round_id,
        "start_time": session.started_at,
        "multiplier": session.multiplier,
        "side_bet_score": session.side_bet_score,
        "randomness": session.randomness.value,
        "deck": [_serialize_card(c) for c in session.deck],
        "daily_games": session.daily_round_count,
        "state": session.state.name,
    }


def _deserialize_session(data: dict[str, Any]) -> PlayerSession:
    """Restore a player session from its record."""
    return PlayerSession(
        data["player"],
        round_id=data["game_id"],
        started_at=data["start_time"],
        multiplier=data["multiplier"],
        side_bet_score=data["side_bet_score"],
        deck=Deck(_deserialize_card(c) for c in data["deck"]),
        randomness=RandomnessSlot(data["randomness"]),
        daily_round_count=data["daily_games"],
        state=RoundState[data["state"]],
    )


async def _record_events(emitter: EventEmitter) -> None:
    """
    Append the emitter's pending events to the league event log.

    Called once the record that emitted them has been saved, so only
    committed changes reach the log. The emitter's history is cleared
    afterwards.
    """
    events = emitter.history
    if not events:
        return

    for event in events:
        logger.debug("Event %s", event)

    async with record_lock(EVENT_LOG_KEY):
        store = await get_record_store()
        data = await store.get(EVENT_LOG_KEY) or {"events": []}
        log = data["events"] + [event.to_dict() for event in events]
        await store.set(EVENT_LOG_KEY, {"events": log[-EVENT_LOG_LIMIT:]})
    emitter.clear_history()


async def load_events() -> list[dict[str, Any]]:
    """Load the league event log, oldest first."""
    store = await get_record_store()
    data = await store.get(EVENT_LOG_KEY)
    return data["events"] if data else []


async def load_table() -> GameTable | None:
    """Load the league table, if one has been initialized."""
    store = await get_record_store()
    data = await store.get(TABLE_KEY)
    if data is None:
        return None
    return _deserialize_table(data)


async def save_table(table: GameTable) -> None:
    store = await get_record_store()
    await store.set(TABLE_KEY, _serialize_table(table))
    await _record_events(table.events)


async def load_session(player: str) -> PlayerSession:
    """Load a player's session, creating a fresh one on first contact."""
    store = await get_record_store()
    data = await store.get(session_key(player))
    if data is None:
        return PlayerSession(player)
    return _deserialize_session(data)


async def save_session(session: PlayerSession) -> None:
    store = await get_record_store()
    await store.set(session_key(session.player), _serialize_session(session))
    await _record_events(session.events)


async def require_table() -> GameTable:
    """Load the league table or answer 404."""
    table = await load_table()
    if table is None:
        raise HTTPException(status_code=404, detail="League has not been initialized")
    return table
