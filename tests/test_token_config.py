# tests/test_token_config.py
from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from remit.ledger.constants import DAY, MAX_SUPPLY, POOL_NAMES, UNIT
from remit.ledger.unlock import CliffThenFull, Immediate, LinearVesting, PeriodicStep
from remit.runtime.token_config import (
    PoolConfig,
    default_token_config,
    load_token_config,
    read_token_config_file,
    token_config_to_json,
    validate_token_config,
)


def test_default_config_is_valid_and_fits_under_cap() -> None:
    cfg = default_token_config()
    validate_token_config(cfg)
    assert set(cfg.pools) == set(POOL_NAMES)
    allocated = sum(pc.allocation for pc in cfg.pools.values())
    assert allocated + cfg.initial_supply <= MAX_SUPPLY
    assert cfg.mode == "prod"
    assert isinstance(cfg.pools["dev_fund"].policy, PeriodicStep)
    assert isinstance(cfg.pools["circulation"].policy, Immediate)


def test_validation_rejects_missing_pool() -> None:
    cfg = default_token_config()
    pools = dict(cfg.pools)
    pools.pop("reserved")
    with pytest.raises(ValueError, match="pools must be exactly"):
        validate_token_config(replace(cfg, pools=pools))


def test_validation_rejects_allocations_over_cap() -> None:
    cfg = default_token_config()
    pools = dict(cfg.pools)
    pools["marketing"] = PoolConfig(allocation=MAX_SUPPLY, policy=Immediate())
    with pytest.raises(ValueError, match="exceed max_supply"):
        validate_token_config(replace(cfg, pools=pools))


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": " "},
        {"symbol": ""},
        {"mode": "staging"},
        {"max_supply": 0},
        {"initial_supply": -1},
    ],
)
def test_validation_rejects_bad_scalars(overrides) -> None:
    with pytest.raises(ValueError):
        validate_token_config(replace(default_token_config(), **overrides))


def test_validation_rejects_bad_policy() -> None:
    cfg = default_token_config()
    pools = dict(cfg.pools)
    pools["team_advisor"] = PoolConfig(allocation=UNIT, policy=PeriodicStep(cliff_s=0, step=UNIT, interval_s=0))
    with pytest.raises(ValueError, match="team_advisor"):
        validate_token_config(replace(cfg, pools=pools))


def test_json_file_overrides_merge_with_defaults(tmp_path: Path) -> None:
    p = tmp_path / "token.json"
    p.write_text(
        json.dumps(
            {
                "mode": "dev",
                "genesis_time": 1_700_000_000,
                "pools": {
                    "reserved": {"policy": {"kind": "cliff_then_full", "cliff_s": 90 * DAY}},
                    "marketing": {"allocation": 50_000 * UNIT},
                },
                "staking": {"reward_rate_bps": 500},
            }
        ),
        encoding="utf-8",
    )

    cfg = read_token_config_file(str(p))
    d = default_token_config()

    assert cfg.mode == "dev"
    assert cfg.genesis_time == 1_700_000_000
    assert cfg.pools["reserved"] == PoolConfig(d.pools["reserved"].allocation, CliffThenFull(cliff_s=90 * DAY))
    assert cfg.pools["marketing"] == PoolConfig(50_000 * UNIT, Immediate())
    assert cfg.pools["dev_fund"] == d.pools["dev_fund"]
    assert cfg.staking.reward_rate_bps == 500
    assert cfg.staking.withdraw_cliff_s == d.staking.withdraw_cliff_s


def test_yaml_file_is_supported(tmp_path: Path) -> None:
    p = tmp_path / "token.yaml"
    p.write_text(
        "symbol: RMT\n"
        "pools:\n"
        "  team_advisor:\n"
        "    policy:\n"
        "      kind: linear_vesting\n"
        "      cliff_s: 0\n"
        "      duration_s: 31536000\n",
        encoding="utf-8",
    )
    cfg = read_token_config_file(str(p))
    assert cfg.symbol == "RMT"
    assert cfg.pools["team_advisor"].policy == LinearVesting(cliff_s=0, duration_s=31_536_000)


def test_file_must_hold_an_object(tmp_path: Path) -> None:
    p = tmp_path / "token.json"
    p.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        read_token_config_file(str(p))


def test_env_path_and_mode_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / "token.json"
    p.write_text(json.dumps({"name": "Remit Testnet", "mode": "testnet"}), encoding="utf-8")

    monkeypatch.setenv("REMIT_TOKEN_CONFIG_PATH", str(p))
    monkeypatch.setenv("REMIT_MODE", "DEV")
    monkeypatch.setenv("REMIT_LOG_LEVEL", "debug")

    cfg = load_token_config()
    assert cfg.name == "Remit Testnet"
    assert cfg.mode == "dev"
    assert cfg.log_level == "DEBUG"


def test_load_without_env_returns_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for k in ("REMIT_TOKEN_CONFIG_PATH", "REMIT_MODE", "REMIT_LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)
    assert load_token_config() == default_token_config()


def test_to_json_round_trips_through_a_file(tmp_path: Path) -> None:
    cfg = replace(default_token_config(), mode="testnet", genesis_time=123)
    p = tmp_path / "token.json"
    p.write_text(json.dumps(token_config_to_json(cfg)), encoding="utf-8")
    assert read_token_config_file(str(p)) == cfg
