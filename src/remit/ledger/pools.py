# src/remit/ledger/pools.py
from __future__ import annotations

"""Supply-pool registry.

The six allocation pools share one mint path:

  mint_from_pool(state, pool, to, amount, now=..., caller=...)

which evaluates the pool's unlock policy at `now`, checks the request against
the pool's remaining allocation and the newly unlocked amount, then delegates
to the ledger mint. The stake-farm pool is additionally gated on the caller
being the registered staking engine.

State layout:

  state["pools"] = {
    "staking_engine": str | None,
    "registry": {
      "<pool>": {"allocation": int, "remaining": int, "genesis_time": int, "policy": {...}},
      ...
    },
  }
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from remit.ledger import token as ledger
from remit.ledger.constants import (
    CIRCULATION,
    DEV_FUND,
    MARKETING,
    POOL_NAMES,
    RESERVED,
    STAKE_FARM,
    TEAM_ADVISOR,
)
from remit.ledger.unlock import UnlockPolicy, mintable, policy_from_json, policy_to_json
from remit.runtime.errors import (
    CALLER_NOT_STAKING_ENGINE,
    ENGINE_ALREADY_SET,
    INVALID_ACCOUNT,
    POOL_EXHAUSTED,
    POOL_LOCKED,
    UNKNOWN_POOL,
    TokenError,
)

Json = Dict[str, Any]


@dataclass
class PoolError(TokenError):
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


def ensure_pools_root(state: Json) -> Json:
    root = state.get("pools")
    if not isinstance(root, dict):
        root = {}
        state["pools"] = root
    root.setdefault("staking_engine", None)
    if not isinstance(root.get("registry"), dict):
        root["registry"] = {}
    return root


def create_pools(state: Json, specs: Mapping[str, tuple[int, UnlockPolicy]], *, genesis_time: int) -> Json:
    """Create pools at genesis. Pools that already exist are left untouched."""
    reg = ensure_pools_root(state)["registry"]
    for name, (allocation, policy) in specs.items():
        if name in reg:
            continue
        reg[str(name)] = {
            "allocation": int(allocation),
            "remaining": int(allocation),
            "genesis_time": int(genesis_time),
            "policy": policy_to_json(policy),
        }
    return reg


def _get_pool(state: Json, pool: str) -> Json:
    reg = _as_dict(ensure_pools_root(state).get("registry"))
    rec = reg.get(str(pool))
    if not isinstance(rec, dict):
        raise PoolError(UNKNOWN_POOL, "pool_not_found", {"pool": pool, "known": sorted(reg.keys())})
    return rec


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def pool_names(state: Json) -> list[str]:
    reg = _as_dict(ensure_pools_root(state).get("registry"))
    ordered = [p for p in POOL_NAMES if p in reg]
    return ordered + sorted(p for p in reg if p not in POOL_NAMES)


def pool_remaining(state: Json, pool: str) -> int:
    return _as_int(_get_pool(state, pool).get("remaining"), 0)


def pool_minted(state: Json, pool: str) -> int:
    rec = _get_pool(state, pool)
    return _as_int(rec.get("allocation"), 0) - _as_int(rec.get("remaining"), 0)


def pool_mintable(state: Json, pool: str, now: int) -> int:
    """Cumulative amount the pool's policy permits to have been minted by `now`."""
    rec = _get_pool(state, pool)
    policy = policy_from_json(rec.get("policy"))
    elapsed = int(now) - _as_int(rec.get("genesis_time"), 0)
    return mintable(policy, _as_int(rec.get("allocation"), 0), elapsed)


def pool_available(state: Json, pool: str, now: int) -> int:
    """Unlocked but not yet minted, as of `now`."""
    return max(0, pool_mintable(state, pool, now) - pool_minted(state, pool))


def staking_engine(state: Json) -> Optional[str]:
    v = ensure_pools_root(state).get("staking_engine")
    s = str(v).strip() if v is not None else ""
    return s or None


def pool_info(state: Json, pool: str, now: int) -> Json:
    rec = _get_pool(state, pool)
    return {
        "pool": str(pool),
        "allocation": _as_int(rec.get("allocation"), 0),
        "remaining": _as_int(rec.get("remaining"), 0),
        "minted": pool_minted(state, pool),
        "available": pool_available(state, pool, now),
        "genesis_time": _as_int(rec.get("genesis_time"), 0),
        "policy": dict(_as_dict(rec.get("policy"))),
    }


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def set_staking_engine(state: Json, address: str) -> Json:
    addr = str(address or "").strip()
    if ledger.is_null_account(addr):
        raise PoolError(INVALID_ACCOUNT, "staking_engine_is_null_account", {"address": address})

    root = ensure_pools_root(state)
    current = staking_engine(state)
    if current is not None and current != addr:
        raise PoolError(ENGINE_ALREADY_SET, "staking_engine_fixed_at_configuration", {"current": current, "address": addr})

    root["staking_engine"] = addr
    return {"applied": "SET_STAKING_ENGINE", "address": addr, "changed": current is None}


def _require_staking_engine_caller(state: Json, caller: Optional[str]) -> None:
    engine = staking_engine(state)
    if engine is None:
        raise PoolError(CALLER_NOT_STAKING_ENGINE, "staking_engine_not_set", {"caller": caller})
    if str(caller or "").strip() != engine:
        raise PoolError(CALLER_NOT_STAKING_ENGINE, "caller_is_not_staking_engine", {"caller": caller})


def check_mint_from_pool(
    state: Json,
    pool: str,
    to: str,
    amount: int,
    *,
    now: int,
    caller: Optional[str] = None,
) -> int:
    """Validation half of mint_from_pool. Returns the validated amount; writes nothing."""
    rec = _get_pool(state, pool)
    if str(pool) == STAKE_FARM:
        _require_staking_engine_caller(state, caller)

    amt = ledger.require_amount(amount)
    remaining = _as_int(rec.get("remaining"), 0)
    if amt > remaining:
        raise PoolError(POOL_EXHAUSTED, "amount_exceeds_remaining", {"pool": pool, "remaining": remaining, "amount": amt})

    unlocked = pool_available(state, pool, now)
    if amt > unlocked:
        raise PoolError(
            POOL_LOCKED,
            "amount_exceeds_unlocked",
            {"pool": pool, "unlocked": unlocked, "amount": amt, "now": int(now)},
        )

    ledger.check_mint(state, to, amt)
    return amt


def mint_from_pool(
    state: Json,
    pool: str,
    to: str,
    amount: int,
    *,
    now: int,
    caller: Optional[str] = None,
) -> Json:
    amt = check_mint_from_pool(state, pool, to, amount, now=now, caller=caller)
    rec = _get_pool(state, pool)
    remaining = _as_int(rec.get("remaining"), 0)

    minted = ledger.mint(state, to, amt)
    rec["remaining"] = remaining - amt

    return {
        "applied": "MINT_FROM_POOL",
        "pool": str(pool),
        "to": minted["to"],
        "amount": amt,
        "remaining": int(rec["remaining"]),
    }


def mint_circulation_supply(state: Json, to: str, amount: int, *, now: int) -> Json:
    return mint_from_pool(state, CIRCULATION, to, amount, now=now)


def mint_marketing_supply(state: Json, to: str, amount: int, *, now: int) -> Json:
    return mint_from_pool(state, MARKETING, to, amount, now=now)


def mint_reserved_supply(state: Json, to: str, amount: int, *, now: int) -> Json:
    return mint_from_pool(state, RESERVED, to, amount, now=now)


def mint_stake_farm_supply(state: Json, to: str, amount: int, *, now: int, caller: Optional[str]) -> Json:
    return mint_from_pool(state, STAKE_FARM, to, amount, now=now, caller=caller)


def mint_dev_fund_supply(state: Json, to: str, amount: int, *, now: int) -> Json:
    return mint_from_pool(state, DEV_FUND, to, amount, now=now)


def mint_team_advisor_supply(state: Json, to: str, amount: int, *, now: int) -> Json:
    return mint_from_pool(state, TEAM_ADVISOR, to, amount, now=now)


__all__ = [
    "PoolError",
    "check_mint_from_pool",
    "create_pools",
    "ensure_pools_root",
    "mint_circulation_supply",
    "mint_dev_fund_supply",
    "mint_from_pool",
    "mint_marketing_supply",
    "mint_reserved_supply",
    "mint_stake_farm_supply",
    "mint_team_advisor_supply",
    "pool_available",
    "pool_info",
    "pool_mintable",
    "pool_minted",
    "pool_names",
    "pool_remaining",
    "set_staking_engine",
    "staking_engine",
]
