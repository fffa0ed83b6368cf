# src/remit/ledger/unlock.py
from __future__ import annotations

"""Pool unlock policies.

An unlock policy maps the time elapsed since a pool's genesis to the cumulative
amount the pool permits to have been minted by then. Policies are plain frozen
dataclasses and `mintable()` is a pure function of (policy, allocation, elapsed),
so tests can probe any instant without advancing a clock.

Supported policies:

  Immediate                                 whole allocation at all times
  CliffThenFull(cliff_s)                    0 before the cliff, whole allocation after
  PeriodicStep(cliff_s, step, interval_s)   one `step` at the cliff, one more per interval
  LinearVesting(cliff_s, duration_s)        linear from 0 to allocation over `duration_s`
                                            starting at the cliff

Stored form (state / config files) is a JSON dict tagged by "kind":
  {"kind": "periodic_step", "cliff_s": 2592000, "step": 24000000000000000000000, "interval_s": 2592000}
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Union

Json = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class Immediate:
    pass


@dataclass(frozen=True, slots=True)
class CliffThenFull:
    cliff_s: int


@dataclass(frozen=True, slots=True)
class PeriodicStep:
    cliff_s: int
    step: int
    interval_s: int


@dataclass(frozen=True, slots=True)
class LinearVesting:
    cliff_s: int
    duration_s: int


UnlockPolicy = Union[Immediate, CliffThenFull, PeriodicStep, LinearVesting]

_KINDS = {
    "immediate": Immediate,
    "cliff_then_full": CliffThenFull,
    "periodic_step": PeriodicStep,
    "linear_vesting": LinearVesting,
}


def mintable(policy: UnlockPolicy, allocation: int, elapsed: int) -> int:
    """Cumulative amount the policy permits to have been minted after `elapsed` seconds.

    Negative elapsed (now before genesis) is treated as before every cliff.
    """
    alloc = int(allocation)
    t = int(elapsed)

    if isinstance(policy, Immediate):
        return alloc

    if isinstance(policy, CliffThenFull):
        return 0 if t < int(policy.cliff_s) else alloc

    if isinstance(policy, PeriodicStep):
        since = t - int(policy.cliff_s)
        if since < 0:
            return 0
        steps = since // int(policy.interval_s) + 1
        return min(alloc, steps * int(policy.step))

    if isinstance(policy, LinearVesting):
        since = t - int(policy.cliff_s)
        if since < 0:
            return 0
        duration = int(policy.duration_s)
        if duration <= 0 or since >= duration:
            return alloc
        return min(alloc, alloc * since // duration)

    raise TypeError(f"unsupported unlock policy: {type(policy)!r}")


def validate_policy(policy: UnlockPolicy) -> None:
    """Fail-fast parameter checks; raises ValueError."""
    cliff = getattr(policy, "cliff_s", 0)
    if int(cliff) < 0:
        raise ValueError(f"cliff_s must be >= 0; got: {cliff}")
    if isinstance(policy, PeriodicStep):
        if int(policy.step) <= 0:
            raise ValueError(f"step must be > 0; got: {policy.step}")
        if int(policy.interval_s) <= 0:
            raise ValueError(f"interval_s must be > 0; got: {policy.interval_s}")
    if isinstance(policy, LinearVesting) and int(policy.duration_s) < 0:
        raise ValueError(f"duration_s must be >= 0; got: {policy.duration_s}")


def policy_kind(policy: UnlockPolicy) -> str:
    for kind, cls in _KINDS.items():
        if isinstance(policy, cls):
            return kind
    raise TypeError(f"unsupported unlock policy: {type(policy)!r}")


def policy_to_json(policy: UnlockPolicy) -> Json:
    out: Json = {"kind": policy_kind(policy)}
    for name in (f.name for f in fields(policy)):
        out[name] = int(getattr(policy, name))
    return out


def policy_from_json(obj: Any) -> UnlockPolicy:
    if isinstance(obj, str):
        obj = {"kind": obj}
    if not isinstance(obj, dict):
        raise ValueError("unlock policy must be an object with a 'kind'")

    kind = str(obj.get("kind") or "").strip().lower()
    cls = _KINDS.get(kind)
    if cls is None:
        raise ValueError(f"unknown unlock policy kind {kind!r}; expected one of {sorted(_KINDS)}")

    kwargs: Json = {}
    for name in (f.name for f in fields(cls)):
        if name not in obj:
            raise ValueError(f"unlock policy {kind!r} missing field {name!r}")
        try:
            kwargs[name] = int(obj[name])
        except (TypeError, ValueError):
            raise ValueError(f"unlock policy {kind!r} field {name!r} must be an integer") from None

    policy = cls(**kwargs)
    validate_policy(policy)
    return policy


__all__ = [
    "CliffThenFull",
    "Immediate",
    "LinearVesting",
    "PeriodicStep",
    "UnlockPolicy",
    "mintable",
    "policy_from_json",
    "policy_kind",
    "policy_to_json",
    "validate_policy",
]
