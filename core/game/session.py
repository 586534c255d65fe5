"""Player session with a round state machine."""

import logging
import math
from dataclasses import dataclass
from typing import Callable

from transitions import Machine

from core.cards import U64_MAX, Deck, shuffle_deck
from core.errors import (
    BetTimeExpired,
    DailyLimitReached,
    GameOver,
    RandomnessAlreadyReceived,
    RandomnessNotReceived,
    RoundNotStarted,
)
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import RoundState, sources_of
from core.payouts import Direction
from core.ports import RandomnessOracle
from core.resolution import BetOutcome, SideBet, resolve_bet

logger = logging.getLogger(__name__)

DAILY_ROUND_LIMIT = 10
ROUND_TIME_LIMIT = 60  # seconds from round start


@dataclass(frozen=True)
class RandomnessSlot:
    """
    Write-once holder for the session's random value.

    Unset until the oracle delivers a value; ``set`` refuses a second one.
    """

    value: int | None = None

    @property
    def is_set(self) -> bool:
        return self.value is not None

    def set(self, value: int) -> "RandomnessSlot":
        """Return the filled slot, refusing to overwrite."""
        if self.is_set:
            raise RandomnessAlreadyReceived()
        if not 0 <= value <= U64_MAX:
            raise ValueError(f"Randomness must be an unsigned 64-bit integer, got {value}")
        return RandomnessSlot(value)


class PlayerSession:
    """
    One player's High/Low session.

    Owns the round state machine (idle → active → finished), the remaining
    deck, and the running multiplier and side-bet score. Time is always
    supplied by the caller as unix seconds.
    """

    STATES = [s.name.lower() for s in RoundState]

    TRANSITIONS = [
        {"trigger": "begin_round", "source": sources_of(RoundState.ACTIVE), "dest": "active"},
        {"trigger": "continue_round", "source": "active", "dest": "active"},
        {"trigger": "finish_round", "source": sources_of(RoundState.FINISHED), "dest": "finished"},
    ]

    def __init__(
        self,
        player: str,
        *,
        round_id: int = 0,
        started_at: int = 0,
        multiplier: float = 1.0,
        side_bet_score: int = 0,
        deck: Deck | None = None,
        randomness: RandomnessSlot | None = None,
        daily_round_count: int = 0,
        state: RoundState = RoundState.IDLE,
    ) -> None:
        """
        Initialize a session, fresh or restored from storage.

        Args:
            player: Identity of the owning player
            round_id: Caller-chosen id of the current round
            started_at: Unix time the current round started
            multiplier: Running multiplier of the current round
            side_bet_score: Accumulated side-bet score
            deck: Remaining deck (empty until randomness arrives)
            randomness: Write-once random value slot
            daily_round_count: Rounds started today
            state: Round state to resume in
        """
        self.player = player
        self.round_id = round_id
        self.started_at = started_at
        self.multiplier = multiplier
        self.side_bet_score = side_bet_score
        self.deck = deck if deck is not None else Deck()
        self.randomness = randomness or RandomnessSlot()
        self.daily_round_count = daily_round_count
        self.events = EventEmitter()

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial=state.name.lower(),
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> RoundState:
        """Get current round state as enum."""
        return RoundState[self._machine_state.upper()]  # type: ignore

    @property
    def finished(self) -> bool:
        return self.state == RoundState.FINISHED

    @property
    def score(self) -> int:
        """Leaderboard score: the multiplier in hundredths plus side-bet score, floored at 0."""
        return max(0, math.floor(self.multiplier * 100) + self.side_bet_score)

    def is_over(self, now: int) -> bool:
        """True once the round has finished or its time budget has run out."""
        if self.state == RoundState.FINISHED:
            return True
        return self.state == RoundState.ACTIVE and now - self.started_at > ROUND_TIME_LIMIT

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to session events."""
        self.events.subscribe(handler, event_type)

    def request_randomness(self, oracle: RandomnessOracle, seed: int) -> str:
        """
        Ask the oracle for this session's random value.

        The oracle delivers the value through its fulfill callback, which
        should call ``receive_randomness``.

        Returns:
            The oracle's request id

        Raises:
            RandomnessAlreadyReceived: If the session already has randomness
        """
        if self.randomness.is_set:
            raise RandomnessAlreadyReceived()
        self.events.emit_new(EventType.RANDOMNESS_REQUESTED, player=self.player, seed=seed)
        return oracle.request(self.player, seed)

    def receive_randomness(self, value: int) -> Deck:
        """
        Accept the oracle's random value and derive the session deck.

        Args:
            value: Unsigned 64-bit random value

        Returns:
            The derived deck

        Raises:
            RandomnessAlreadyReceived: If the session already has randomness
        """
        slot = self.randomness.set(value)
        deck = shuffle_deck(value)

        self.randomness = slot
        self.deck = deck
        logger.info("Randomness received for %s", self.player)
        self.events.emit_new(EventType.RANDOMNESS_RECEIVED, player=self.player, randomness=value)
        return deck

    def start_round(self, round_id: int, now: int) -> None:
        """
        Start a new round, resetting the multiplier and finished state.

        Raises:
            DailyLimitReached: If the daily round cap has been used up
        """
        if self.daily_round_count >= DAILY_ROUND_LIMIT:
            raise DailyLimitReached(player=self.player, daily_round_count=self.daily_round_count)

        self.daily_round_count += 1
        self.started_at = now
        self.round_id = round_id
        self.multiplier = 1.0
        self.begin_round()  # Trigger state transition

        logger.info(
            "Round %s started for %s (%d/%d today)",
            round_id,
            self.player,
            self.daily_round_count,
            DAILY_ROUND_LIMIT,
        )
        self.events.emit_new(EventType.ROUND_STARTED, player=self.player, round_id=round_id)

    def place_bet(
        self,
        direction: Direction,
        side_bet: SideBet | None,
        now: int,
    ) -> BetOutcome:
        """
        Resolve one High/Low bet against the deck.

        A losing bet ends the round: the session is committed as finished
        before ``GameOver`` is raised.

        Args:
            direction: Predicted direction of the next card
            side_bet: Optional color or parity side bet
            now: Current unix time

        Returns:
            The winning bet outcome

        Raises:
            RoundNotStarted: If no round has been started
            GameOver: If the round is over, or ends with this bet
            BetTimeExpired: If the round's time budget has run out
            RandomnessNotReceived: If no deck has been derived yet
        """
        if self.state == RoundState.IDLE:
            raise RoundNotStarted()
        if self.state == RoundState.FINISHED:
            raise GameOver("Round already finished.", round_id=self.round_id)
        if now - self.started_at > ROUND_TIME_LIMIT:
            raise BetTimeExpired(elapsed=now - self.started_at)
        if not self.randomness.is_set:
            raise RandomnessNotReceived()

        try:
            outcome = resolve_bet(self.deck, direction, side_bet)
        except GameOver as exc:
            self._end_round()
            raise self._game_over(exc.message) from exc

        if not outcome.correct:
            self._end_round()
            raise self._game_over()

        self.multiplier *= outcome.multiplier_gain
        if outcome.side_bet_delta is not None:
            self.side_bet_score += outcome.side_bet_delta
        self.continue_round()

        logger.debug(
            "%s bet %s on %s: x%.2f (multiplier %.4f)",
            self.player,
            direction,
            outcome.current_card,
            outcome.multiplier_gain,
            self.multiplier,
        )
        self.events.emit_new(
            EventType.BET_PLACED,
            player=self.player,
            round_id=self.round_id,
            direction=direction.value,
            multiplier_gain=outcome.multiplier_gain,
            side_bet_result=outcome.side_bet_delta,
        )
        return outcome

    def _game_over(self, message: str | None = None) -> GameOver:
        return GameOver(
            message,
            final_multiplier=self.multiplier,
            side_bet_score=self.side_bet_score,
            round_id=self.round_id,
        )

    def _end_round(self) -> None:
        """Commit the finished state and announce the final score."""
        self.finish_round()
        logger.info(
            "Game over for %s in round %s: multiplier %.4f, side bets %d",
            self.player,
            self.round_id,
            self.multiplier,
            self.side_bet_score,
        )
        self.events.emit_new(
            EventType.GAME_OVER,
            player=self.player,
            round_id=self.round_id,
            final_multiplier=self.multiplier,
            side_bet_score=self.side_bet_score,
        )

    def reset_daily_count(self) -> None:
        """External daily reset of the round cap."""
        self.daily_round_count = 0
        self.events.emit_new(EventType.DAILY_COUNT_RESET, player=self.player)
