"""Game API endpoints: randomness, rounds and bets."""

import logging

from fastapi import APIRouter

from api.deps import Now, make_oracle
from api.identity import Caller
from api.records import (
    TABLE_KEY,
    load_session,
    require_table,
    save_session,
    save_table,
    session_key,
)
from api.schemas import (
    BetRequest,
    BetResponse,
    CardResponse,
    DailyResetRequest,
    RandomnessRequest,
    RandomnessResponse,
    ReceiveRandomnessRequest,
    SessionStateResponse,
    StartRoundRequest,
    SubmitResponse,
)
from api.storage import record_lock
from core.cards import Card
from core.errors import GameOver
from core.game import PlayerSession
from core.payouts import Direction
from core.resolution import ColorBet, ParityBet, SideBet

logger = logging.getLogger(__name__)

router = APIRouter()


def _card_response(card: Card) -> CardResponse:
    return CardResponse(rank=str(card.rank), suit=card.suit.value, value=card.value)


def _session_state_response(session: PlayerSession) -> SessionStateResponse:
    """Convert a session to its response."""
    return SessionStateResponse(
        player=session.player,
        state=session.state.name,
        round_id=session.round_id,
        started_at=session.started_at,
        multiplier=session.multiplier,
        side_bet_score=session.side_bet_score,
        score=session.score,
        cards_remaining=session.deck.cards_remaining,
        has_randomness=session.randomness.is_set,
        daily_round_count=session.daily_round_count,
        finished=session.finished,
    )


def _side_bet(request: BetRequest) -> SideBet | None:
    """Translate the request's side bet into the engine's."""
    side_bet = request.side_bet
    if side_bet is None:
        return None
    if side_bet.type == "color":
        return ColorBet(is_red=side_bet.red)
    return ParityBet(is_even=side_bet.even)


@router.get("/state")
async def get_state(player: Caller) -> SessionStateResponse:
    """Get the caller's session state."""
    session = await load_session(player)
    return _session_state_response(session)


@router.post("/randomness/request")
async def request_randomness(request: RandomnessRequest, player: Caller) -> RandomnessResponse:
    """Ask the oracle for randomness; the deck is derived when it is delivered."""
    async with record_lock(session_key(player)):
        session = await load_session(player)
        oracle = make_oracle(lambda _player, value: session.receive_randomness(value))
        request_id = session.request_randomness(oracle, request.seed)
        await save_session(session)

    logger.info("Randomness request %s for %s", request_id, player)
    return RandomnessResponse(request_id=request_id, cards_remaining=session.deck.cards_remaining)


@router.post("/randomness/receive")
async def receive_randomness(request: ReceiveRandomnessRequest, caller: Caller) -> RandomnessResponse:
    """Oracle callback: deliver randomness to a player's session (admin only)."""
    table = await require_table()
    table.require_admin(caller)

    async with record_lock(session_key(request.player)):
        session = await load_session(request.player)
        session.receive_randomness(request.randomness)
        await save_session(session)

    return RandomnessResponse(cards_remaining=session.deck.cards_remaining)


@router.post("/start")
async def start_round(request: StartRoundRequest, player: Caller, now: Now) -> SessionStateResponse:
    """Start a new round."""
    async with record_lock(session_key(player)):
        session = await load_session(player)
        session.start_round(request.round_id, now)
        await save_session(session)
    return _session_state_response(session)


@router.post("/bet")
async def place_bet(request: BetRequest, player: Caller, now: Now) -> BetResponse:
    """Place a High/Low bet; a losing bet ends the round with GameOver."""
    async with record_lock(session_key(player)):
        session = await load_session(player)
        try:
            outcome = session.place_bet(Direction(request.direction), _side_bet(request), now)
        except GameOver:
            # The finished round is committed even though the call fails
            await save_session(session)
            raise
        await save_session(session)

    return BetResponse(
        correct=outcome.correct,
        multiplier_gain=outcome.multiplier_gain,
        side_bet_result=outcome.side_bet_delta,
        card=_card_response(outcome.current_card),
        next_card=_card_response(outcome.next_card),
        multiplier=session.multiplier,
        side_bet_score=session.side_bet_score,
    )


@router.post("/submit")
async def submit_score(player: Caller, now: Now) -> SubmitResponse:
    """Submit the score of the caller's ended round to the leaderboard."""
    # Session lock first, then table lock; no route takes them the other way round
    async with record_lock(session_key(player)):
        session = await load_session(player)
        async with record_lock(TABLE_KEY):
            table = await require_table()
            entry = table.submit_session(session, now)
            await save_table(table)
    return SubmitResponse(recorded=entry is not None, score=session.score)


@router.post("/daily-reset")
async def daily_reset(request: DailyResetRequest, caller: Caller) -> SessionStateResponse:
    """Reset a player's daily round count (admin only)."""
    table = await require_table()
    table.require_admin(caller)

    async with record_lock(session_key(request.player)):
        session = await load_session(request.player)
        session.reset_daily_count()
        await save_session(session)
    return _session_state_response(session)
