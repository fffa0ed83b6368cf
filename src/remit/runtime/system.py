# src/remit/runtime/system.py
from __future__ import annotations

import copy
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from remit.ledger import pools
from remit.ledger import token as ledger
from remit.ledger.constants import CIRCULATION, DEV_FUND, MARKETING, RESERVED, STAKE_FARM, TEAM_ADVISOR
from remit.ledger.state import TokenView
from remit.runtime.errors import INVALID_TIME, TokenError
from remit.runtime.event_log import log_event, log_warning
from remit.runtime.genesis import build_genesis_state
from remit.runtime.state_invariants import check_invariants
from remit.runtime.token_config import TokenConfig, default_token_config, load_token_config
from remit.staking import engine

Json = Dict[str, Any]

_log = logging.getLogger("remit.system")


@dataclass
class ClockError(TokenError):
    code: str
    reason: str
    details: Optional[Json] = None


def _truthy(v: Optional[str]) -> bool:
    if v is None:
        return False
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


class TokenSystem:
    """Owns the ledger state and applies every operation all-or-nothing.

    Each state-changing call runs against a deep copy of the committed state.
    The copy replaces the committed state only if the call returns; any
    TokenError (or invariant violation) discards it, so failed calls leave
    balances, pools, positions and the event log exactly as they were.

    Time is supplied by the caller (`now`, unix seconds) and must never move
    backwards relative to the latest committed `now`.
    """

    def __init__(
        self,
        cfg: Optional[TokenConfig] = None,
        *,
        genesis_time: Optional[int] = None,
        check_invariants_after_commit: Optional[bool] = None,
    ) -> None:
        self.cfg = cfg or default_token_config()

        if genesis_time is None:
            genesis_time = self.cfg.genesis_time
        if genesis_time is None:
            genesis_time = int(time.time())
        self.genesis_time = int(genesis_time)

        if check_invariants_after_commit is None:
            check_invariants_after_commit = _truthy(os.environ.get("REMIT_CHECK_INVARIANTS"))
        self._check_invariants = bool(check_invariants_after_commit)

        self.state: Json = build_genesis_state(self.cfg, genesis_time=self.genesis_time)
        self._events: List[Json] = list(self.state.get("events") or [])
        self.state["events"] = []

        log_event(
            _log,
            "genesis",
            symbol=self.cfg.symbol,
            genesis_time=self.genesis_time,
            max_supply=int(self.cfg.max_supply),
            initial_supply=int(self.cfg.initial_supply),
            staking_engine=pools.staking_engine(self.state),
        )

    @classmethod
    def from_env(cls) -> "TokenSystem":
        return cls(load_token_config())

    # ------------------------------------------------------------------
    # Apply plumbing
    # ------------------------------------------------------------------

    @property
    def now(self) -> int:
        return int(self.state.get("time", self.genesis_time))

    def _check_clock(self, now: Any) -> int:
        if isinstance(now, bool) or not isinstance(now, int):
            raise ClockError(INVALID_TIME, "now_not_int", {"now": repr(now)})
        if now < self.now:
            raise ClockError(INVALID_TIME, "clock_moved_backwards", {"now": now, "last": self.now})
        return now

    def _apply(self, op: str, fn: Callable[..., Json], *args: Any, now: Optional[int] = None, **kwargs: Any) -> Json:
        try:
            working: Json = copy.deepcopy(self.state)
            working["events"] = []
            if now is not None:
                now = self._check_clock(now)
                receipt = fn(working, *args, now=now, **kwargs)
                working["time"] = now
            else:
                receipt = fn(working, *args, **kwargs)
            if self._check_invariants:
                check_invariants(working)
        except TokenError as e:
            log_warning(_log, "op_rejected", op=op, code=e.code, reason=e.reason, details=e.details)
            raise

        events = list(working.get("events") or [])
        working["events"] = []
        self.state = working
        self._events.extend(events)

        out = dict(receipt)
        out["events"] = events
        log_event(_log, "op_applied", op=op, receipt=out)
        return out

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def read_state(self) -> Json:
        return copy.deepcopy(self.state)

    def view(self) -> TokenView:
        return TokenView.from_state(self.state)

    @property
    def events(self) -> List[Json]:
        return list(self._events)

    def balance_of(self, account: str) -> int:
        return ledger.balance_of(self.state, account)

    def allowance(self, owner: str, spender: str) -> int:
        return ledger.allowance(self.state, owner, spender)

    def total_supply(self) -> int:
        return ledger.total_supply(self.state)

    def max_supply(self) -> int:
        return ledger.max_supply(self.state)

    def pool_remaining(self, pool: str) -> int:
        return pools.pool_remaining(self.state, pool)

    def pool_available(self, pool: str, now: Optional[int] = None) -> int:
        return pools.pool_available(self.state, pool, self.now if now is None else int(now))

    def pool_info(self, pool: str, now: Optional[int] = None) -> Json:
        return pools.pool_info(self.state, pool, self.now if now is None else int(now))

    def pool_names(self) -> List[str]:
        return pools.pool_names(self.state)

    def staking_engine(self) -> Optional[str]:
        return pools.staking_engine(self.state)

    def staking_position(self, staker: str) -> Json:
        return engine.staking_position(self.state, staker)

    def pending_rewards(self, staker: str, now: Optional[int] = None) -> int:
        return engine.get_pending_divs(self.state, staker, self.now if now is None else int(now))

    def holder_count(self) -> int:
        return engine.holder_count(self.state)

    def total_claimed_rewards(self) -> int:
        return engine.total_claimed_rewards(self.state)

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def transfer(self, sender: str, to: str, amount: int) -> Json:
        return self._apply("transfer", ledger.transfer, sender, to, amount)

    def approve(self, owner: str, spender: str, amount: int) -> Json:
        return self._apply("approve", ledger.approve, owner, spender, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> Json:
        return self._apply("transfer_from", ledger.transfer_from, spender, owner, to, amount)

    def mint(self, to: str, amount: int) -> Json:
        return self._apply("mint", ledger.mint, to, amount)

    def burn(self, from_: str, amount: int) -> Json:
        return self._apply("burn", ledger.burn, from_, amount)

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def set_staking_engine(self, address: str) -> Json:
        return self._apply("set_staking_engine", pools.set_staking_engine, address)

    def mint_from_pool(self, pool: str, to: str, amount: int, *, now: int, caller: Optional[str] = None) -> Json:
        return self._apply("mint_from_pool", pools.mint_from_pool, pool, to, amount, now=now, caller=caller)

    def mint_circulation_supply(self, to: str, amount: int, *, now: int) -> Json:
        return self.mint_from_pool(CIRCULATION, to, amount, now=now)

    def mint_marketing_supply(self, to: str, amount: int, *, now: int) -> Json:
        return self.mint_from_pool(MARKETING, to, amount, now=now)

    def mint_reserved_supply(self, to: str, amount: int, *, now: int) -> Json:
        return self.mint_from_pool(RESERVED, to, amount, now=now)

    def mint_stake_farm_supply(self, to: str, amount: int, *, now: int, caller: Optional[str]) -> Json:
        return self.mint_from_pool(STAKE_FARM, to, amount, now=now, caller=caller)

    def mint_dev_fund_supply(self, to: str, amount: int, *, now: int) -> Json:
        return self.mint_from_pool(DEV_FUND, to, amount, now=now)

    def mint_team_advisor_supply(self, to: str, amount: int, *, now: int) -> Json:
        return self.mint_from_pool(TEAM_ADVISOR, to, amount, now=now)

    # ------------------------------------------------------------------
    # Staking
    # ------------------------------------------------------------------

    @property
    def staking_address(self) -> str:
        return engine.engine_address(self.state)

    def deposit(self, staker: str, amount: int, *, now: int) -> Json:
        return self._apply("deposit", engine.deposit, staker, amount, now=now)

    def withdraw(self, staker: str, amount: int, *, now: int) -> Json:
        return self._apply("withdraw", engine.withdraw, staker, amount, now=now)


__all__ = ["ClockError", "TokenSystem"]
