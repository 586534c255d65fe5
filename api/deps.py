"""Shared FastAPI dependencies: clock, ledger and randomness oracle."""

import time
from typing import Annotated

from fastapi import Depends

from config import config
from core.ports import BalanceLedger, FulfillHandler, InMemoryLedger, LocalRandomnessOracle

# Balances are owned by the external funds service; this one backs local runs
_ledger = InMemoryLedger()


def current_time() -> int:
    """Current unix time in seconds."""
    return int(time.time())


def get_ledger() -> BalanceLedger:
    return _ledger


def make_oracle(on_fulfill: FulfillHandler) -> LocalRandomnessOracle:
    """Build the oracle that answers a randomness request."""
    return LocalRandomnessOracle(config.league.oracle_secret, on_fulfill=on_fulfill)


Now = Annotated[int, Depends(current_time)]
Ledger = Annotated[BalanceLedger, Depends(get_ledger)]
