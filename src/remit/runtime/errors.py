from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Error kinds. Every rejection path in the ledger, pool registry and staking
# engine raises a TokenError carrying exactly one of these codes.
INVALID_ACCOUNT = "invalid_account"
INSUFFICIENT_BALANCE = "insufficient_balance"
INSUFFICIENT_ALLOWANCE = "insufficient_allowance"
SUPPLY_CAP_EXCEEDED = "supply_cap_exceeded"
POOL_LOCKED = "pool_locked"
POOL_EXHAUSTED = "pool_exhausted"
CALLER_NOT_STAKING_ENGINE = "caller_not_staking_engine"
ZERO_AMOUNT = "zero_amount"
NO_POSITION = "no_position"
INSUFFICIENT_STAKE = "insufficient_stake"
CLIFF_NOT_ELAPSED = "cliff_not_elapsed"
INVALID_AMOUNT = "invalid_amount"
UNKNOWN_POOL = "unknown_pool"
ENGINE_ALREADY_SET = "engine_already_set"
INVALID_TIME = "invalid_time"


@dataclass
class TokenError(Exception):
    """Canonical error type for ledger, pool and staking failures."""

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"
