"""League API endpoints: initialization, pool, leaderboard and prizes."""

from fastapi import APIRouter, HTTPException

from api.deps import Ledger, Now
from api.identity import Caller
from api.records import TABLE_KEY, load_events, load_table, require_table, save_table
from api.schemas import (
    ClaimRequest,
    ClaimResponse,
    EventResponse,
    FundRequest,
    InitializeRequest,
    LeaderboardEntryResponse,
    LeagueStateResponse,
    PoolResponse,
)
from api.storage import record_lock
from config import config
from core.errors import Unauthorized
from core.game import GameTable

router = APIRouter()


def _league_state_response(table: GameTable) -> LeagueStateResponse:
    """Convert the league table to its response."""
    return LeagueStateResponse(
        admin=table.admin,
        entry_fee=table.entry_fee,
        start_time=table.window_start,
        end_time=table.window_end,
        leaderboard_capacity=table.leaderboard_capacity,
        leaderboard=[
            LeaderboardEntryResponse.model_validate(e) for e in table.leaderboard.entries
        ],
        finalized=table.finalized,
        finalized_at=table.finalized_at,
        pool=table.pool,
        prize_pool=table.prize_pool,
        claimed=sorted(table.claimed),
    )


@router.post("/initialize")
async def initialize(request: InitializeRequest, caller: Caller) -> LeagueStateResponse:
    """Create the league. Only the configured administrator may do this, once."""
    if caller != config.league.admin_id:
        raise Unauthorized(caller=caller)

    async with record_lock(TABLE_KEY):
        if await load_table() is not None:
            raise HTTPException(status_code=409, detail="League already initialized")
        table = GameTable.initialize(
            caller,
            request.start_time,
            request.end_time,
            request.entry_fee,
        )
        await save_table(table)
    return _league_state_response(table)


@router.get("/state")
async def get_league_state() -> LeagueStateResponse:
    """Get the league table and leaderboard."""
    table = await require_table()
    return _league_state_response(table)


@router.post("/fund")
async def fund_pool(request: FundRequest, caller: Caller) -> PoolResponse:
    """Record external funding of the prize pool (admin only)."""
    async with record_lock(TABLE_KEY):
        table = await require_table()
        table.require_admin(caller)
        pool = table.fund_pool(request.amount)
        await save_table(table)
    return PoolResponse(pool=pool)


@router.post("/entry")
async def pay_entry_fee(player: Caller, ledger: Ledger, now: Now) -> PoolResponse:
    """Pay the entry fee into the pool."""
    async with record_lock(TABLE_KEY):
        table = await require_table()
        pool = table.pay_entry_fee(player, ledger, now)
        await save_table(table)
    return PoolResponse(pool=pool)


@router.post("/finalize")
async def finalize_leaderboard(caller: Caller, now: Now) -> LeagueStateResponse:
    """Rank and freeze the leaderboard, opening the claim window (admin only)."""
    async with record_lock(TABLE_KEY):
        table = await require_table()
        table.finalize_leaderboard(caller, now)
        await save_table(table)
    return _league_state_response(table)


@router.post("/claim")
async def claim_prize(request: ClaimRequest, player: Caller, ledger: Ledger, now: Now) -> ClaimResponse:
    """Claim the caller's share of the pool for a leaderboard position."""
    async with record_lock(TABLE_KEY):
        table = await require_table()
        amount = table.claim_prize(request.position, player, ledger, now)
        await save_table(table)
    return ClaimResponse(position=request.position, amount=amount, pool=table.pool)


@router.get("/events")
async def get_events() -> list[EventResponse]:
    """Get the league event log, oldest first."""
    return [EventResponse.model_validate(e) for e in await load_events()]
