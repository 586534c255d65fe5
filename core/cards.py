"""Card and Deck classes - immutable cards, seeded deterministic decks."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterable, Iterator

U64_MAX = 2**64 - 1


class Suit(Enum):
    """Card suits, in canonical deck order."""

    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"
    SPADES = "Spades"

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]

    @property
    def is_red(self) -> bool:
        """Hearts and Diamonds are red."""
        return self in (Suit.HEARTS, Suit.DIAMONDS)


class Rank(Enum):
    """Card ranks; the value is the comparison rank (Ace high)."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the integer rank, 2..14."""
        return self.rank.value

    @property
    def is_red(self) -> bool:
        return self.suit.is_red

    @property
    def is_even(self) -> bool:
        return self.value % 2 == 0

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {str(r): r for r in Rank}
        rank_map["T"] = Rank.TEN

        suit_map = {
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


def standard_cards() -> list[Card]:
    """Return the 52 cards in canonical order: suit-major, rank ascending."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """
    An ordered deck consumed front-to-back.

    A deck is never refilled; once a card is drawn it is gone for the
    lifetime of the deck.
    """

    def __init__(self, cards: Iterable[Card] | None = None) -> None:
        """
        Initialize a deck.

        Args:
            cards: Cards in draw order (top first). Defaults to empty.
        """
        self._cards: list[Card] = list(cards) if cards is not None else []

    @classmethod
    def from_seed(cls, seed: int) -> "Deck":
        """Build a shuffled deck from a 64-bit seed."""
        return shuffle_deck(seed)

    def draw(self) -> Card:
        """Remove and return the top card."""
        if not self._cards:
            raise IndexError("Cannot draw from empty deck")
        return self._cards.pop(0)

    def peek(self) -> Card | None:
        """Return the top card without removing it."""
        return self._cards[0] if self._cards else None

    @property
    def cards(self) -> list[Card]:
        """Return a copy of the remaining cards in draw order."""
        return self._cards.copy()

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def is_empty(self) -> bool:
        return not self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Deck):
            return NotImplemented
        return self._cards == other._cards


def shuffle_deck(seed: int) -> Deck:
    """
    Turn a 64-bit seed into a fully ordered 52-card deck.

    The canonical deck is permuted by a Fisher-Yates shuffle driven by a
    Mersenne Twister seeded with ``seed``; the same seed always yields the
    same order on every platform.

    Args:
        seed: Unsigned 64-bit seed

    Returns:
        The shuffled deck
    """
    if not 0 <= seed <= U64_MAX:
        raise ValueError(f"Seed must be an unsigned 64-bit integer, got {seed}")

    cards = standard_cards()
    Random(seed).shuffle(cards)
    return Deck(cards)
