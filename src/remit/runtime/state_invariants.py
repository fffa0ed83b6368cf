# src/remit/runtime/state_invariants.py
from __future__ import annotations

"""State invariants / normalization helpers.

Remit state is a nested JSON-like dict mutated only by the ledger, pool and
staking modules. This module provides:

  - ensure_state: validates the state is dict-like and creates core containers
  - find_invariant_violations / check_invariants: conservation and accounting
    checks run by tests and, when REMIT_CHECK_INVARIANTS=1, after every commit
"""

from collections.abc import MutableMapping
from typing import Any, Dict, List

Json = Dict[str, Any]


class InvariantViolation(AssertionError):
    def __init__(self, violations: List[str]) -> None:
        super().__init__("; ".join(violations))
        self.violations = list(violations)


def ensure_state(st: Any) -> Json:
    """Ensure `st` is a dict and contains core keys.

    Raises:
        TypeError: if st is not a MutableMapping
    """
    if not isinstance(st, MutableMapping):
        raise TypeError(f"state must be MutableMapping, got {type(st)}")

    for key in ("token", "balances", "allowances", "pools", "staking"):
        cur = st.get(key)
        if cur is None:
            st[key] = {}
        elif not isinstance(cur, dict):
            # Fail closed: do not attempt to coerce arbitrary types.
            raise TypeError(f"state[{key!r}] must be dict, got {type(cur)}")

    ev = st.get("events")
    if ev is None:
        st["events"] = []
    elif not isinstance(ev, list):
        raise TypeError(f"state['events'] must be list, got {type(ev)}")

    return st  # type: ignore[return-value]


def find_invariant_violations(st: Json) -> List[str]:
    out: List[str] = []

    tok = st.get("token") or {}
    balances = st.get("balances") or {}
    total = int(tok.get("total_supply", 0))
    cap = int(tok.get("max_supply", 0))

    neg = sorted(a for a, b in balances.items() if int(b) < 0)
    if neg:
        out.append(f"negative balances: {neg}")

    if sum(int(b) for b in balances.values()) != total:
        out.append("total_supply != sum(balances)")

    if total > cap:
        out.append(f"total_supply {total} exceeds max_supply {cap}")

    registry = (st.get("pools") or {}).get("registry") or {}
    for name, rec in registry.items():
        alloc = int(rec.get("allocation", 0))
        rem = int(rec.get("remaining", 0))
        if rem < 0 or rem > alloc:
            out.append(f"pool {name!r} remaining {rem} outside [0, {alloc}]")

    staking = st.get("staking") or {}
    positions = staking.get("positions") or {}
    active = 0
    principal = 0
    for staker, pos in positions.items():
        dep = int(pos.get("deposited_tokens", 0))
        if dep < 0:
            out.append(f"negative principal for {staker!r}")
        if dep > 0:
            active += 1
            principal += dep

    if int(staking.get("number_of_holders", 0)) != active:
        out.append(f"number_of_holders {staking.get('number_of_holders')} != active positions {active}")

    addr = staking.get("address")
    if addr and int(balances.get(addr, 0)) < principal:
        out.append("staking custody balance below total principal")

    earned = sum(int(p.get("total_earned_tokens", 0)) for p in positions.values())
    if earned != int(staking.get("total_claimed_rewards", 0)):
        out.append("total_claimed_rewards != sum(total_earned_tokens)")

    return out


def check_invariants(st: Json) -> None:
    violations = find_invariant_violations(st)
    if violations:
        raise InvariantViolation(violations)


__all__ = ["InvariantViolation", "check_invariants", "ensure_state", "find_invariant_violations"]
