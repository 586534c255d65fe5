"""Bet resolution: advance a round by one card draw."""

from dataclasses import dataclass

from core.cards import Card, Deck
from core.errors import GameOver
from core.payouts import Direction, multiplier_gain


@dataclass(frozen=True)
class ColorBet:
    """Side bet on the current card's color."""

    is_red: bool

    def settle(self, card: Card) -> int:
        return 1 if card.is_red == self.is_red else -1


@dataclass(frozen=True)
class ParityBet:
    """Side bet on the current card's rank parity."""

    is_even: bool

    def settle(self, card: Card) -> int:
        return 1 if card.is_even == self.is_even else -1


SideBet = ColorBet | ParityBet


@dataclass(frozen=True)
class BetOutcome:
    """Result of one bet. Transient, never persisted."""

    correct: bool
    multiplier_gain: float
    current_card: Card
    next_card: Card
    side_bet_delta: int | None = None


def is_correct(direction: Direction, current: Card, following: Card) -> bool:
    """Strict comparison; equal ranks lose both ways."""
    if direction == Direction.HIGH:
        return following.value > current.value
    return following.value < current.value


def resolve_bet(
    deck: Deck,
    direction: Direction,
    side_bet: SideBet | None = None,
) -> BetOutcome:
    """
    Draw the current card and compare it against the new top of the deck.

    The deck loses one card on every call, whatever the outcome. Applying the
    gain and ending the round is left to the caller.

    Args:
        deck: The session's remaining deck
        direction: Whether the next card is predicted higher or lower
        side_bet: Optional color or parity prediction on the current card

    Returns:
        The bet outcome

    Raises:
        GameOver: If there is no card to draw or none left to compare against
    """
    if deck.is_empty:
        raise GameOver("No cards left in the deck.")

    current = deck.draw()
    following = deck.peek()
    if following is None:
        raise GameOver("No card left to compare against.", current_card=str(current))

    return BetOutcome(
        correct=is_correct(direction, current, following),
        multiplier_gain=multiplier_gain(current.value, direction),
        current_card=current,
        next_card=following,
        side_bet_delta=side_bet.settle(current) if side_bet is not None else None,
    )
