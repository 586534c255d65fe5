"""Pydantic schemas for API requests and responses."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from core.cards import U64_MAX

U64 = Annotated[int, Field(ge=0, le=U64_MAX)]


# League schemas
class InitializeRequest(BaseModel):
    """Request to create the league."""

    start_time: U64 = Field(..., description="Game window start (unix seconds)")
    end_time: U64 = Field(..., description="Game window end (unix seconds)")
    entry_fee: U64 = Field(..., description="Entry fee paid into the pool")


class FundRequest(BaseModel):
    """External funding of the prize pool."""

    amount: int = Field(..., ge=1, le=U64_MAX)


class ClaimRequest(BaseModel):
    """Request to claim the prize for a leaderboard position."""

    position: int = Field(..., ge=0, le=255)


class LeaderboardEntryResponse(BaseModel):
    """Leaderboard row."""

    model_config = ConfigDict(from_attributes=True)

    player: str
    score: int


class LeagueStateResponse(BaseModel):
    """League table state."""

    admin: str
    entry_fee: int
    start_time: int
    end_time: int
    leaderboard_capacity: int
    leaderboard: list[LeaderboardEntryResponse]
    finalized: bool
    finalized_at: int | None
    pool: int
    prize_pool: int
    claimed: list[int]


class PoolResponse(BaseModel):
    """Pool balance after a funding event."""

    pool: int


class ClaimResponse(BaseModel):
    """Result of a prize claim."""

    position: int
    amount: int
    pool: int


class EventResponse(BaseModel):
    """One entry of the league event log."""

    type: str
    data: dict[str, Any]
    timestamp: str


# Game schemas
class RandomnessRequest(BaseModel):
    """Request randomness from the oracle."""

    seed: U64


class ReceiveRandomnessRequest(BaseModel):
    """Oracle callback delivering randomness for a player."""

    player: str
    randomness: U64


class RandomnessResponse(BaseModel):
    """Randomness request or delivery result."""

    request_id: str | None = None
    cards_remaining: int


class StartRoundRequest(BaseModel):
    """Request to start a round."""

    round_id: U64


class ColorSideBetRequest(BaseModel):
    """Side bet on the color of the current card."""

    type: Literal["color"] = "color"
    red: bool


class ParitySideBetRequest(BaseModel):
    """Side bet on the parity of the current card."""

    type: Literal["parity"] = "parity"
    even: bool


SideBetRequest = Annotated[
    ColorSideBetRequest | ParitySideBetRequest,
    Field(discriminator="type"),
]


class BetRequest(BaseModel):
    """Request to place a High/Low bet."""

    direction: Literal["high", "low"]
    side_bet: SideBetRequest | None = None


class DailyResetRequest(BaseModel):
    """Reset a player's daily round count."""

    player: str


class CardResponse(BaseModel):
    """Card representation."""

    rank: str
    suit: str
    value: int


class BetResponse(BaseModel):
    """Winning bet result."""

    correct: bool
    multiplier_gain: float
    side_bet_result: int | None
    card: CardResponse
    next_card: CardResponse
    multiplier: float
    side_bet_score: int


class SessionStateResponse(BaseModel):
    """Current player session state."""

    player: str
    state: str
    round_id: int
    started_at: int
    multiplier: float
    side_bet_score: int
    score: int
    cards_remaining: int
    has_randomness: bool
    daily_round_count: int
    finished: bool


class SubmitResponse(BaseModel):
    """Result of submitting a round's score."""

    recorded: bool
    score: int


class ErrorResponse(BaseModel):
    """Game error payload."""

    error: str
    detail: str
