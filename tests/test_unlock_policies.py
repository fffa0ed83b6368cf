# tests/test_unlock_policies.py
from __future__ import annotations

import pytest

from remit.ledger.unlock import (
    CliffThenFull,
    Immediate,
    LinearVesting,
    PeriodicStep,
    mintable,
    policy_from_json,
    policy_to_json,
)

ALLOC = 1_000


def test_immediate_is_fully_unlocked_at_all_times() -> None:
    for t in (-10, 0, 1, 10**9):
        assert mintable(Immediate(), ALLOC, t) == ALLOC


def test_cliff_then_full_boundary() -> None:
    p = CliffThenFull(cliff_s=100)
    assert mintable(p, ALLOC, -1) == 0
    assert mintable(p, ALLOC, 99) == 0
    assert mintable(p, ALLOC, 100) == ALLOC
    assert mintable(p, ALLOC, 10**6) == ALLOC


def test_periodic_step_releases_one_step_at_cliff_and_per_interval() -> None:
    p = PeriodicStep(cliff_s=100, step=300, interval_s=50)
    assert mintable(p, ALLOC, 99) == 0
    assert mintable(p, ALLOC, 100) == 300
    assert mintable(p, ALLOC, 149) == 300
    assert mintable(p, ALLOC, 150) == 600
    assert mintable(p, ALLOC, 200) == 900
    # capped at the allocation
    assert mintable(p, ALLOC, 250) == ALLOC
    assert mintable(p, ALLOC, 10**6) == ALLOC


def test_linear_vesting_interpolates_and_caps() -> None:
    p = LinearVesting(cliff_s=100, duration_s=400)
    assert mintable(p, ALLOC, 99) == 0
    assert mintable(p, ALLOC, 100) == 0
    assert mintable(p, ALLOC, 200) == 250
    assert mintable(p, ALLOC, 301) == 502  # floor(1000 * 201 / 400)
    assert mintable(p, ALLOC, 500) == ALLOC
    assert mintable(p, ALLOC, 10**6) == ALLOC


def test_linear_vesting_with_zero_duration_unlocks_at_cliff() -> None:
    p = LinearVesting(cliff_s=10, duration_s=0)
    assert mintable(p, ALLOC, 9) == 0
    assert mintable(p, ALLOC, 10) == ALLOC


def test_mintable_is_monotonic_in_elapsed_time() -> None:
    policies = [
        Immediate(),
        CliffThenFull(cliff_s=30),
        PeriodicStep(cliff_s=30, step=70, interval_s=7),
        LinearVesting(cliff_s=30, duration_s=90),
    ]
    for p in policies:
        prev = 0
        for t in range(-5, 200):
            cur = mintable(p, ALLOC, t)
            assert prev <= cur <= ALLOC
            prev = cur


def test_policy_json_round_trip_and_string_shorthand() -> None:
    p = PeriodicStep(cliff_s=1, step=2, interval_s=3)
    assert policy_to_json(p) == {"kind": "periodic_step", "cliff_s": 1, "step": 2, "interval_s": 3}
    assert policy_from_json(policy_to_json(p)) == p
    assert policy_from_json("immediate") == Immediate()


@pytest.mark.parametrize(
    "raw",
    [
        {"kind": "nope"},
        {"kind": "cliff_then_full"},
        {"kind": "periodic_step", "cliff_s": 0, "step": 0, "interval_s": 10},
        {"kind": "periodic_step", "cliff_s": 0, "step": 10, "interval_s": 0},
        {"kind": "linear_vesting", "cliff_s": -1, "duration_s": 10},
        {"kind": "cliff_then_full", "cliff_s": "soon"},
        ["immediate"],
    ],
)
def test_policy_from_json_rejects_malformed(raw) -> None:
    with pytest.raises(ValueError):
        policy_from_json(raw)
