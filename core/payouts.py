"""High/Low payout table."""

from enum import Enum
from typing import Mapping


class Direction(Enum):
    """Which way the player bets the next card will go."""

    HIGH = "high"
    LOW = "low"

    def __str__(self) -> str:
        return self.name.title()


# rank -> (High gain, Low gain)
PAYOUT_TABLE: Mapping[int, tuple[float, float]] = {
    2: (1.2, 4.0),
    3: (1.25, 3.5),
    4: (1.3, 3.0),
    5: (1.35, 2.5),
    6: (1.4, 2.0),
    7: (1.5, 1.7),
    8: (1.6, 1.6),
    9: (1.8, 1.6),
    10: (2.0, 1.5),
    11: (2.5, 1.4),
    12: (3.0, 1.3),
    13: (4.0, 1.2),
    14: (1.2, 1.2),  # Ace pays flat either way
}

NEUTRAL_GAIN = 1.0


def multiplier_gain(rank: int, direction: Direction) -> float:
    """
    Look up the multiplier gain for betting ``direction`` on a card of ``rank``.

    Args:
        rank: Rank of the current card (2-14, Ace = 14)
        direction: The player's bet

    Returns:
        The gain applied to the round multiplier on a correct bet, or 1.0
        for a rank outside the table
    """
    gains = PAYOUT_TABLE.get(rank)
    if gains is None:
        return NEUTRAL_GAIN
    high, low = gains
    return high if direction == Direction.HIGH else low
