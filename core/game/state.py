"""Round state enumeration."""

from enum import Enum, auto


class RoundState(Enum):
    """
    Round state machine states.

    Flow: IDLE → ACTIVE → FINISHED. A new round may be started from any state;
    starting one is the only way out of FINISHED.
    """

    # No round started yet
    IDLE = auto()

    # Bets are being placed
    ACTIVE = auto()

    # Round ended by a losing bet or an exhausted deck
    FINISHED = auto()

    def __str__(self) -> str:
        return self.name.title()

# Valid state transitions within a round
VALID_TRANSITIONS: dict[RoundState, list[RoundState]] = {
    RoundState.IDLE: [RoundState.ACTIVE],
    RoundState.ACTIVE: [RoundState.ACTIVE, RoundState.FINISHED],
    RoundState.FINISHED: [RoundState.ACTIVE],  # Only a new round leaves it
}


def is_valid_transition(from_state: RoundState, to_state: RoundState) -> bool:
    """
    Check if a state transition is valid within a round.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])


def sources_of(to_state: RoundState) -> list[str]:
    """State machine names of every state that may move to ``to_state``."""
    return [s.name.lower() for s in RoundState if is_valid_transition(s, to_state)]
