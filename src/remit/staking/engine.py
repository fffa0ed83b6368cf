# src/remit/staking/engine.py
from __future__ import annotations

"""Staking engine: principal custody and linear reward accrual.

Rewards accrue per staker as

    deposited_tokens * reward_rate_bps * (now - last_claimed_time) / (10_000 * YEAR)

(floored to base units) and are settled, not merely viewed, on every deposit and
withdrawal. Settling before the principal changes means a new deposit never
earns for time that elapsed before it arrived.

Rewards are minted out of the stake-farm pool with the engine's address as the
caller; principal sits in the engine's own ledger account.

State layout:

  state["staking"] = {
    "address": str,
    "reward_rate_bps": int,
    "withdraw_cliff_s": int,
    "total_claimed_rewards": int,
    "number_of_holders": int,
    "positions": {
      staker: {"deposited_tokens": int, "staking_time": int | None,
               "last_claimed_time": int | None, "total_earned_tokens": int},
    },
  }
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from remit.ledger import pools
from remit.ledger import token as ledger
from remit.ledger.constants import (
    BPS_DENOMINATOR,
    REWARD_RATE_BPS,
    STAKE_FARM,
    STAKING_ENGINE_ADDRESS,
    WITHDRAW_CLIFF_S,
    YEAR,
)
from remit.runtime.errors import (
    CALLER_NOT_STAKING_ENGINE,
    CLIFF_NOT_ELAPSED,
    INSUFFICIENT_STAKE,
    NO_POSITION,
    ZERO_AMOUNT,
    TokenError,
)

Json = Dict[str, Any]


@dataclass
class StakingError(TokenError):
    code: str
    reason: str
    details: Optional[Json] = None


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def _as_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def ensure_staking_root(state: Json) -> Json:
    st = state.get("staking")
    if not isinstance(st, dict):
        st = {}
        state["staking"] = st
    st.setdefault("address", STAKING_ENGINE_ADDRESS)
    st.setdefault("reward_rate_bps", REWARD_RATE_BPS)
    st.setdefault("withdraw_cliff_s", WITHDRAW_CLIFF_S)
    st.setdefault("total_claimed_rewards", 0)
    st.setdefault("number_of_holders", 0)
    if not isinstance(st.get("positions"), dict):
        st["positions"] = {}
    return st


def engine_address(state: Json) -> str:
    return str(ensure_staking_root(state).get("address") or "")


def _empty_position() -> Json:
    return {
        "deposited_tokens": 0,
        "staking_time": None,
        "last_claimed_time": None,
        "total_earned_tokens": 0,
    }


def _get_position(state: Json, staker: str) -> Json:
    return _as_dict(ensure_staking_root(state)["positions"].get(str(staker)))


def _ensure_position(state: Json, staker: str) -> Json:
    positions = ensure_staking_root(state)["positions"]
    pos = positions.get(str(staker))
    if not isinstance(pos, dict):
        pos = _empty_position()
        positions[str(staker)] = pos
    return pos


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def staking_position(state: Json, staker: str) -> Json:
    pos = _get_position(state, staker)
    out = _empty_position()
    for k in out:
        if k in pos:
            out[k] = pos[k]
    return out


def holder_count(state: Json) -> int:
    return _as_int(ensure_staking_root(state).get("number_of_holders"), 0)


def total_claimed_rewards(state: Json) -> int:
    return _as_int(ensure_staking_root(state).get("total_claimed_rewards"), 0)


def get_pending_divs(state: Json, staker: str, now: int) -> int:
    """Rewards accrued since the last settlement. Read-only."""
    pos = _get_position(state, staker)
    deposited = _as_int(pos.get("deposited_tokens"), 0)
    if deposited <= 0:
        return 0

    elapsed = int(now) - _as_int(pos.get("last_claimed_time"), int(now))
    if elapsed <= 0:
        return 0

    rate = _as_int(ensure_staking_root(state).get("reward_rate_bps"), REWARD_RATE_BPS)
    return deposited * rate * elapsed // (BPS_DENOMINATOR * YEAR)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def _require_registered_engine(state: Json) -> str:
    addr = engine_address(state)
    registered = pools.staking_engine(state)
    if registered != addr:
        raise StakingError(
            CALLER_NOT_STAKING_ENGINE,
            "staking_engine_not_registered",
            {"engine": addr, "registered": registered},
        )
    return addr


def _check_settle(state: Json, staker: str, now: int) -> int:
    """Raise now if the stake farm cannot cover the pending payout."""
    pending = get_pending_divs(state, staker, now)
    if pending > 0:
        pools.check_mint_from_pool(state, STAKE_FARM, staker, pending, now=now, caller=engine_address(state))
    return pending


def _settle(state: Json, staker: str, now: int) -> int:
    """Pay out pending rewards and reset the reward clock. Returns the amount paid."""
    pending = get_pending_divs(state, staker, now)
    pos = _ensure_position(state, staker)

    if pending > 0:
        pools.mint_from_pool(state, STAKE_FARM, staker, pending, now=now, caller=engine_address(state))
        root = ensure_staking_root(state)
        pos["total_earned_tokens"] = _as_int(pos.get("total_earned_tokens"), 0) + pending
        root["total_claimed_rewards"] = _as_int(root.get("total_claimed_rewards"), 0) + pending
        ledger.emit_event(state, "RewardsTransferred", holder=str(staker), amount=pending)

    pos["last_claimed_time"] = int(now)
    return pending


def deposit(state: Json, staker: str, amount: int, *, now: int) -> Json:
    amt = ledger.require_amount(amount)
    if amt == 0:
        raise StakingError(ZERO_AMOUNT, "cannot_deposit_zero", {"staker": staker})

    addr = _require_registered_engine(state)
    # Validate the principal pull against the pre-reward balance so a failed
    # transfer can never follow a paid reward.
    _, staker_s, _, _ = ledger.check_transfer_from(state, addr, staker, addr, amt)
    _check_settle(state, staker_s, now)

    root = ensure_staking_root(state)
    pos = _ensure_position(state, staker_s)
    opened = _as_int(pos.get("deposited_tokens"), 0) <= 0
    if opened:
        pos["staking_time"] = int(now)
        root["number_of_holders"] = _as_int(root.get("number_of_holders"), 0) + 1

    paid = _settle(state, staker_s, now)

    ledger.transfer_from(state, addr, staker_s, addr, amt)
    pos["deposited_tokens"] = _as_int(pos.get("deposited_tokens"), 0) + amt

    return {
        "applied": "DEPOSIT",
        "staker": staker_s,
        "amount": amt,
        "rewards_paid": paid,
        "deposited_tokens": int(pos["deposited_tokens"]),
        "opened": opened,
        "number_of_holders": int(root["number_of_holders"]),
    }


def withdraw(state: Json, staker: str, amount: int, *, now: int) -> Json:
    staker_s = str(staker or "").strip()
    pos = _get_position(state, staker_s)
    deposited = _as_int(pos.get("deposited_tokens"), 0)
    if deposited <= 0:
        raise StakingError(NO_POSITION, "no_active_position", {"staker": staker_s})

    amt = ledger.require_amount(amount)
    if amt == 0:
        raise StakingError(ZERO_AMOUNT, "cannot_withdraw_zero", {"staker": staker_s})

    root = ensure_staking_root(state)
    cliff = _as_int(root.get("withdraw_cliff_s"), WITHDRAW_CLIFF_S)
    staked_at = _as_int(pos.get("staking_time"), 0)
    if int(now) - staked_at < cliff:
        raise StakingError(
            CLIFF_NOT_ELAPSED,
            "withdraw_before_cliff",
            {"staker": staker_s, "staking_time": staked_at, "unlock_time": staked_at + cliff, "now": int(now)},
        )

    if amt > deposited:
        raise StakingError(INSUFFICIENT_STAKE, "withdraw_exceeds_deposit", {"staker": staker_s, "deposited": deposited, "amount": amt})

    addr = engine_address(state)
    ledger.check_transfer(state, addr, staker_s, amt)
    _check_settle(state, staker_s, now)

    paid = _settle(state, staker_s, now)

    pos = _ensure_position(state, staker_s)
    left = deposited - amt
    pos["deposited_tokens"] = left
    ledger.transfer(state, addr, staker_s, amt)

    closed = left == 0
    if closed:
        root["number_of_holders"] = max(0, _as_int(root.get("number_of_holders"), 0) - 1)
        pos["staking_time"] = None
        pos["last_claimed_time"] = None

    return {
        "applied": "WITHDRAW",
        "staker": staker_s,
        "amount": amt,
        "rewards_paid": paid,
        "deposited_tokens": left,
        "closed": closed,
        "number_of_holders": int(root["number_of_holders"]),
    }


__all__ = [
    "StakingError",
    "deposit",
    "engine_address",
    "ensure_staking_root",
    "get_pending_divs",
    "holder_count",
    "staking_position",
    "total_claimed_rewards",
    "withdraw",
]
