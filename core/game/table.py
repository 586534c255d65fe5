"""Game table: the league-wide state owned by the administrator."""

import logging
from typing import Iterable

from core.errors import (
    InvalidEntryFee,
    InvalidStartTime,
    LeaderboardFinalized,
    OutsideGameWindow,
    PrizeAlreadyClaimed,
    RoundNotFinished,
    Unauthorized,
)
from core.game.events import EventEmitter, EventType
from core.game.session import PlayerSession
from core.leaderboard import DEFAULT_CAPACITY, Leaderboard, LeaderboardEntry
from core.ports import BalanceLedger
from core.prizes import check_claim, checked_add, checked_sub, prize_amount

logger = logging.getLogger(__name__)


class GameTable:
    """
    League state for one game window.

    Holds the admin identity, the entry fee, the window bounds, the prize
    pool and the leaderboard. Every operation validates completely before it
    mutates anything.
    """

    def __init__(
        self,
        admin: str,
        entry_fee: int,
        window_start: int,
        window_end: int,
        *,
        leaderboard: Leaderboard | None = None,
        pool: int = 0,
        prize_pool: int = 0,
        claimed: Iterable[int] = (),
    ) -> None:
        """
        Build a table, typically restored from storage.

        Use ``GameTable.initialize`` to create a new league.
        """
        self.admin = admin
        self.entry_fee = entry_fee
        self.window_start = window_start
        self.window_end = window_end
        self.leaderboard = leaderboard or Leaderboard(DEFAULT_CAPACITY)
        self.pool = pool
        # Pool balance frozen at finalization; every prize share is taken from it
        self.prize_pool = prize_pool
        self.claimed: set[int] = set(claimed)
        self.events = EventEmitter()

    @classmethod
    def initialize(
        cls,
        admin: str,
        window_start: int,
        window_end: int,
        entry_fee: int,
    ) -> "GameTable":
        """
        Create a new league.

        Raises:
            InvalidStartTime: If the window does not start before it ends
            InvalidEntryFee: If the entry fee is not positive
        """
        if window_start >= window_end:
            raise InvalidStartTime(window_start=window_start, window_end=window_end)
        if entry_fee <= 0:
            raise InvalidEntryFee(entry_fee=entry_fee)

        table = cls(admin, entry_fee, window_start, window_end)
        logger.info(
            "League initialized by %s: window %d-%d, entry fee %d",
            admin,
            window_start,
            window_end,
            entry_fee,
        )
        table.events.emit_new(
            EventType.GAME_INITIALIZED,
            admin=admin,
            entry_fee=entry_fee,
            start_time=window_start,
            end_time=window_end,
        )
        return table

    @property
    def leaderboard_capacity(self) -> int:
        return self.leaderboard.capacity

    @property
    def finalized(self) -> bool:
        return self.leaderboard.is_finalized

    @property
    def finalized_at(self) -> int | None:
        return self.leaderboard.finalized_at

    def require_admin(self, caller: str) -> None:
        """
        Raises:
            Unauthorized: Unless ``caller`` is the league admin
        """
        if caller != self.admin:
            logger.warning("Rejected admin operation from %s", caller)
            raise Unauthorized(caller=caller)

    def is_window_open(self, now: int) -> bool:
        return self.window_start <= now <= self.window_end

    def fund_pool(self, amount: int) -> int:
        """Add externally supplied funds to the pool and return the new balance."""
        if amount <= 0:
            raise ValueError("Funding amount must be positive")
        self.pool = checked_add(self.pool, amount)
        self.events.emit_new(EventType.POOL_FUNDED, amount=amount, pool=self.pool)
        return self.pool

    def pay_entry_fee(self, player: str, ledger: BalanceLedger, now: int) -> int:
        """
        Move the entry fee from the player's balance into the pool.

        Raises:
            LeaderboardFinalized: Once the leaderboard has been finalized
            OutsideGameWindow: Outside the game window
            InsufficientFunds: If the ledger cannot debit the player
        """
        if self.finalized:
            raise LeaderboardFinalized()
        if not self.is_window_open(now):
            raise OutsideGameWindow(now=now)
        new_pool = checked_add(self.pool, self.entry_fee)

        ledger.debit(player, self.entry_fee)
        self.pool = new_pool

        logger.info("%s paid entry fee %d (pool %d)", player, self.entry_fee, self.pool)
        self.events.emit_new(EventType.ENTRY_FEE_PAID, player=player, amount=self.entry_fee)
        return self.pool

    def submit_score(self, player: str, score: int, now: int) -> LeaderboardEntry | None:
        """
        Submit a score to the leaderboard while the window is open.

        Returns:
            The recorded entry, or None if the player already has a better score
        """
        if self.finalized:
            raise LeaderboardFinalized()
        if not self.is_window_open(now):
            raise OutsideGameWindow(now=now)

        entry = self.leaderboard.submit(player, score)
        if entry is not None:
            self.events.emit_new(EventType.SCORE_SUBMITTED, player=player, score=score)
        return entry

    def submit_session(self, session: PlayerSession, now: int) -> LeaderboardEntry | None:
        """
        Submit the score of a player's ended round.

        Raises:
            RoundNotFinished: If the round is still in play
        """
        if not session.is_over(now):
            raise RoundNotFinished(player=session.player, round_id=session.round_id)
        return self.submit_score(session.player, session.score, now)

    def finalize_leaderboard(self, caller: str, now: int) -> list[LeaderboardEntry]:
        """
        Rank and freeze the leaderboard, opening the claim window.

        Raises:
            Unauthorized: Unless the caller is the admin
            LeaderboardFinalized: If it was already finalized
        """
        self.require_admin(caller)
        entries = self.leaderboard.finalize(now)
        self.prize_pool = self.pool
        self.events.emit_new(
            EventType.LEADERBOARD_FINALIZED,
            timestamp=now,
            prize_pool=self.prize_pool,
            leaderboard=[{"player": e.player, "score": e.score} for e in entries],
        )
        return entries

    def claim_prize(self, position: int, requester: str, ledger: BalanceLedger, now: int) -> int:
        """
        Pay the requester's share of the prize pool for their leaderboard position.

        Shares are taken from the pool as it stood at finalization, so the
        amount for a position does not depend on the order of claims. The
        requester is credited first; the live pool is only debited once the
        credit has gone through.

        Returns:
            The amount paid

        Raises:
            PrizeWindowExpired: If not finalized or the window has closed
            NotOnLeaderboard: If the position is invalid or not the requester's
            PrizeAlreadyClaimed: If the position has already been paid
            ArithmeticOverflow: If the prize computation overflows
        """
        check_claim(self.leaderboard, position, requester, now)
        if position in self.claimed:
            raise PrizeAlreadyClaimed(position=position)

        amount = prize_amount(self.prize_pool, position)
        new_pool = checked_sub(self.pool, amount)

        ledger.credit(requester, amount)
        self.pool = new_pool
        self.claimed.add(position)

        logger.info("%s claimed %d for position %d", requester, amount, position)
        self.events.emit_new(
            EventType.PRIZE_CLAIMED,
            player=requester,
            position=position,
            prize=amount,
        )
        return amount
