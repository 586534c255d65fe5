"""Game error taxonomy.

Every failure an entry point can report is a ``GameError`` subclass carrying a
stable ``code`` (what the API returns) and a human-readable message.
"""

from typing import Any


class GameError(Exception):
    """Base class for all game errors."""

    code: str = "GameError"
    message: str = "Game error."

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# Validation


class ValidationError(GameError):
    """Bad constructor or request arguments."""


class InvalidStartTime(ValidationError):
    code = "InvalidStartTime"
    message = "Invalid start time. Start time must be less than end time."


class InvalidEntryFee(ValidationError):
    code = "InvalidEntryFee"
    message = "Entry fee cannot be zero."


# Authorization


class AuthorizationError(GameError):
    """Caller lacks the privilege for the operation."""


class Unauthorized(AuthorizationError):
    code = "Unauthorized"
    message = "Unauthorized access."


# State conflicts


class StateConflictError(GameError):
    """Operation is not allowed in the record's current state."""


class RandomnessAlreadyReceived(StateConflictError):
    code = "RandomnessAlreadyReceived"
    message = "Randomness already received for this game."


class RandomnessNotReceived(StateConflictError):
    code = "RandomnessNotReceived"
    message = "No randomness has been received; the deck is not ready."


class DailyLimitReached(StateConflictError):
    code = "DailyLimitReached"
    message = "Daily game limit reached."


class BetTimeExpired(StateConflictError):
    code = "BetTimeExpired"
    message = "Bet placement time expired."


class RoundNotStarted(StateConflictError):
    code = "RoundNotStarted"
    message = "No round has been started."


class RoundNotFinished(StateConflictError):
    code = "RoundNotFinished"
    message = "The round is still in play."


class LeaderboardFinalized(StateConflictError):
    code = "LeaderboardFinalized"
    message = "Leaderboard is already finalized."


class OutsideGameWindow(StateConflictError):
    code = "OutsideGameWindow"
    message = "The game window is not open."


class InsufficientFunds(StateConflictError):
    code = "InsufficientFunds"
    message = "Insufficient funds."


# Terminal outcome


class TerminalOutcome(GameError):
    """A normal round-ending signal rather than a failure."""


class GameOver(TerminalOutcome):
    code = "GameOver"
    message = "Game over."


# Eligibility


class EligibilityError(GameError):
    """Caller is not eligible for a prize."""


class NotOnLeaderboard(EligibilityError):
    code = "NotOnLeaderboard"
    message = "Not on leaderboard."


class PrizeWindowExpired(EligibilityError):
    code = "PrizeWindowExpired"
    message = "Prize window expired."


class LeaderboardNotFinalized(PrizeWindowExpired):
    """Same gate and code as ``PrizeWindowExpired``, distinct diagnostics."""

    message = "Prize window is not open; the leaderboard has not been finalized."


class PrizeAlreadyClaimed(EligibilityError):
    code = "PrizeAlreadyClaimed"
    message = "Prize for this position has already been claimed."


# Arithmetic


class ArithmeticOverflow(GameError, ArithmeticError):
    code = "ArithmeticError"
    message = "Arithmetic error occurred."
