"""Prize distribution: position shares of the pool and claim eligibility."""

from core.cards import U64_MAX
from core.errors import (
    ArithmeticOverflow,
    LeaderboardNotFinalized,
    NotOnLeaderboard,
    PrizeWindowExpired,
)
from core.leaderboard import Leaderboard

# Percent of the pool paid per leaderboard position
PRIZE_SCHEDULE: tuple[int, ...] = (50, 30, 20)

CLAIM_WINDOW = 72 * 3600  # seconds after finalization


def checked_add(a: int, b: int) -> int:
    """Unsigned 64-bit addition that refuses to overflow."""
    result = a + b
    if result > U64_MAX:
        raise ArithmeticOverflow(operation="add", operands=(a, b))
    return result


def checked_sub(a: int, b: int) -> int:
    """Unsigned 64-bit subtraction that refuses to underflow."""
    result = a - b
    if result < 0:
        raise ArithmeticOverflow(operation="sub", operands=(a, b))
    return result


def checked_mul(a: int, b: int) -> int:
    """Unsigned 64-bit multiplication that refuses to overflow."""
    result = a * b
    if not 0 <= result <= U64_MAX:
        raise ArithmeticOverflow(operation="mul", operands=(a, b))
    return result


def checked_div(a: int, b: int) -> int:
    """Unsigned integer division; division by zero is an arithmetic error."""
    if b == 0:
        raise ArithmeticOverflow(operation="div", operands=(a, b))
    return a // b


def prize_percentage(position: int) -> int:
    """
    Share of the pool, in percent, for a leaderboard position.

    Raises:
        NotOnLeaderboard: For any position without a payout
    """
    if not 0 <= position < len(PRIZE_SCHEDULE):
        raise NotOnLeaderboard(position=position)
    return PRIZE_SCHEDULE[position]


def prize_amount(pool: int, position: int) -> int:
    """
    Compute ``floor(pool * percentage / 100)`` with overflow checks.

    Args:
        pool: Current pool balance
        position: Leaderboard position (0-based)

    Returns:
        The amount to pay
    """
    return checked_div(checked_mul(pool, prize_percentage(position)), 100)


def check_claim(leaderboard: Leaderboard, position: int, requester: str, now: int) -> None:
    """
    Validate a claim, in order: finalized, within window, valid position,
    requester owns the position.

    Raises:
        LeaderboardNotFinalized: Before finalization
        PrizeWindowExpired: After the claim window closes
        NotOnLeaderboard: For an empty, unpaid or someone else's position
    """
    finalized_at = leaderboard.finalized_at
    if finalized_at is None:
        raise LeaderboardNotFinalized()
    if now > finalized_at + CLAIM_WINDOW:
        raise PrizeWindowExpired(finalized_at=finalized_at, now=now)

    entries = leaderboard.entries
    if position < 0 or position >= len(entries):
        raise NotOnLeaderboard(position=position)
    prize_percentage(position)
    if entries[position].player != requester:
        raise NotOnLeaderboard("Position belongs to another player.", position=position)
