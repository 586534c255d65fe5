"""Leaderboard ranking and the one-way finalization latch."""

import logging
from dataclasses import dataclass
from typing import Iterable

from core.cards import U64_MAX
from core.errors import LeaderboardFinalized

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 3


@dataclass(frozen=True)
class LeaderboardEntry:
    """A player's submitted score."""

    player: str
    score: int
    submitted_seq: int = 0  # Submission order; earlier wins ties


@dataclass(frozen=True)
class Open:
    """Leaderboard still accepts scores."""


@dataclass(frozen=True)
class Finalized:
    """Leaderboard frozen at unix time ``at``."""

    at: int


Finalization = Open | Finalized


def rank_entries(entries: Iterable[LeaderboardEntry], capacity: int) -> list[LeaderboardEntry]:
    """
    Rank entries by score, highest first, and keep the top ``capacity``.

    Equal scores keep submission order, so the earliest submission ranks
    higher.
    """
    ranked = sorted(entries, key=lambda e: (-e.score, e.submitted_seq))
    return ranked[:capacity]


class Leaderboard:
    """
    Collects each player's best score until it is finalized.

    Finalizing ranks and truncates the entries exactly once; afterwards the
    board is immutable.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        entries: Iterable[LeaderboardEntry] = (),
        finalization: Finalization | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("Leaderboard capacity must be at least 1")
        self.capacity = capacity
        self._entries: list[LeaderboardEntry] = list(entries)
        self.finalization: Finalization = finalization or Open()
        self._next_seq = max((e.submitted_seq for e in self._entries), default=-1) + 1

    @property
    def entries(self) -> list[LeaderboardEntry]:
        """Entries in ranked order."""
        if self.is_finalized:
            return self._entries.copy()
        return rank_entries(self._entries, len(self._entries))

    @property
    def is_finalized(self) -> bool:
        return isinstance(self.finalization, Finalized)

    @property
    def finalized_at(self) -> int | None:
        if isinstance(self.finalization, Finalized):
            return self.finalization.at
        return None

    def submit(self, player: str, score: int) -> LeaderboardEntry | None:
        """
        Submit a score, keeping only the player's best.

        Returns:
            The new entry, or None if the player already has a score at
            least as high

        Raises:
            LeaderboardFinalized: If the leaderboard is frozen
        """
        if self.is_finalized:
            raise LeaderboardFinalized()
        if not 0 <= score <= U64_MAX:
            raise ValueError(f"Score must be an unsigned 64-bit integer, got {score}")

        existing = next((e for e in self._entries if e.player == player), None)
        if existing is not None and existing.score >= score:
            return None

        entry = LeaderboardEntry(player=player, score=score, submitted_seq=self._next_seq)
        self._next_seq += 1
        self._entries = [e for e in self._entries if e.player != player]
        self._entries.append(entry)
        return entry

    def finalize(self, now: int) -> list[LeaderboardEntry]:
        """
        Rank, truncate to capacity and freeze the leaderboard.

        Raises:
            LeaderboardFinalized: If it was already finalized
        """
        if self.is_finalized:
            raise LeaderboardFinalized()

        self._entries = rank_entries(self._entries, self.capacity)
        self.finalization = Finalized(at=now)
        logger.info("Leaderboard finalized at %d with %d entries", now, len(self._entries))
        return self._entries.copy()

    def __len__(self) -> int:
        return len(self._entries)
