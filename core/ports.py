"""Capabilities the engine consumes from its environment.

The engine never moves funds or produces entropy itself. It talks to a
``BalanceLedger`` and a ``RandomnessOracle``; the in-memory versions here back
local development and tests.
"""

import hashlib
import logging
from typing import Callable, Protocol
from uuid import uuid4

from core.cards import U64_MAX
from core.errors import ArithmeticOverflow, InsufficientFunds

logger = logging.getLogger(__name__)


class BalanceLedger(Protocol):
    """Integer balances keyed by identity."""

    def balance(self, identity: str) -> int: ...

    def credit(self, identity: str, amount: int) -> None: ...

    def debit(self, identity: str, amount: int) -> None: ...


# Delivers (player, randomness) once the oracle has a value
FulfillHandler = Callable[[str, int], None]


class RandomnessOracle(Protocol):
    """Source of random u64 values tagged with a caller seed."""

    def request(self, player: str, seed: int) -> str: ...


class InMemoryLedger:
    """Balance ledger held in a dict."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(balances or {})

    def balance(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def credit(self, identity: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Credit amount must be non-negative")
        new_balance = self.balance(identity) + amount
        if new_balance > U64_MAX:
            raise ArithmeticOverflow(identity=identity)
        self._balances[identity] = new_balance

    def debit(self, identity: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Debit amount must be non-negative")
        available = self.balance(identity)
        if amount > available:
            raise InsufficientFunds(identity=identity, required=amount, available=available)
        self._balances[identity] = available - amount

    def snapshot(self) -> dict[str, int]:
        return self._balances.copy()


class LocalRandomnessOracle:
    """
    In-process oracle.

    Each request is answered immediately with BLAKE2b(secret, seed, nonce)
    truncated to 64 bits, delivered through ``on_fulfill``.
    """

    def __init__(self, secret: str, on_fulfill: FulfillHandler | None = None) -> None:
        self._key = hashlib.blake2b(secret.encode()).digest()
        self._on_fulfill = on_fulfill

    def derive(self, seed: int, nonce: str) -> int:
        """Derive the random value for a seed and request nonce."""
        if not 0 <= seed <= U64_MAX:
            raise ValueError(f"Seed must be an unsigned 64-bit integer, got {seed}")
        digest = hashlib.blake2b(
            seed.to_bytes(8, "little") + nonce.encode(),
            key=self._key,
            digest_size=8,
        ).digest()
        return int.from_bytes(digest, "little")

    def request(self, player: str, seed: int) -> str:
        """
        Request randomness for a player.

        Returns:
            The request id
        """
        request_id = str(uuid4())
        value = self.derive(seed, request_id)
        logger.debug("Oracle request %s for %s (seed %d)", request_id, player, seed)
        if self._on_fulfill is not None:
            self._on_fulfill(player, value)
        return request_id
