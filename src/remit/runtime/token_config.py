# src/remit/runtime/token_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from remit.ledger import constants as C
from remit.ledger.unlock import (
    Immediate,
    PeriodicStep,
    UnlockPolicy,
    policy_from_json,
    policy_to_json,
    validate_policy,
)

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def _as_opt_int(v: Any) -> Optional[int]:
    if v is None:
        return None
    try:
        return int(v)
    except Exception:
        return None


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


@dataclass(frozen=True)
class PoolConfig:
    allocation: int
    policy: UnlockPolicy


@dataclass(frozen=True)
class StakingConfig:
    address: str
    reward_rate_bps: int
    withdraw_cliff_s: int


@dataclass(frozen=True)
class TokenConfig:
    name: str
    symbol: str
    decimals: int
    mode: str  # "dev" | "testnet" | "prod"

    max_supply: int
    initial_supply: int
    owner: str

    # None means "genesis at system construction time"
    genesis_time: Optional[int]

    pools: Dict[str, PoolConfig] = field(default_factory=dict)
    staking: StakingConfig = field(
        default_factory=lambda: StakingConfig(C.STAKING_ENGINE_ADDRESS, C.REWARD_RATE_BPS, C.WITHDRAW_CLIFF_S)
    )

    # register the staking engine at genesis instead of leaving it to an admin call
    register_staking_engine: bool = True

    log_level: str = "INFO"


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def default_pool_configs() -> Dict[str, PoolConfig]:
    return {
        C.CIRCULATION: PoolConfig(C.CIRCULATION_ALLOCATION, Immediate()),
        C.MARKETING: PoolConfig(C.MARKETING_ALLOCATION, Immediate()),
        C.RESERVED: PoolConfig(C.RESERVED_ALLOCATION, Immediate()),
        C.STAKE_FARM: PoolConfig(C.STAKE_FARM_ALLOCATION, Immediate()),
        C.DEV_FUND: PoolConfig(
            C.DEV_FUND_ALLOCATION,
            PeriodicStep(cliff_s=C.DEV_FUND_CLIFF_S, step=C.DEV_FUND_STEP, interval_s=C.DEV_FUND_INTERVAL_S),
        ),
        C.TEAM_ADVISOR: PoolConfig(
            C.TEAM_ADVISOR_ALLOCATION,
            PeriodicStep(
                cliff_s=C.TEAM_ADVISOR_CLIFF_S,
                step=C.TEAM_ADVISOR_STEP,
                interval_s=C.TEAM_ADVISOR_INTERVAL_S,
            ),
        ),
    }


def default_token_config() -> TokenConfig:
    return TokenConfig(
        name=C.TOKEN_NAME,
        symbol=C.TOKEN_SYMBOL,
        decimals=C.TOKEN_DECIMALS,
        # Production-safe default: client-supplied clocks are refused unless
        # an operator opts into dev/testnet explicitly.
        mode="prod",
        max_supply=C.MAX_SUPPLY,
        initial_supply=C.INITIAL_SUPPLY,
        owner=C.OWNER_ACCOUNT_ID,
        genesis_time=None,
        pools=default_pool_configs(),
        staking=StakingConfig(
            address=C.STAKING_ENGINE_ADDRESS,
            reward_rate_bps=C.REWARD_RATE_BPS,
            withdraw_cliff_s=C.WITHDRAW_CLIFF_S,
        ),
        register_staking_engine=True,
        log_level="INFO",
    )


def validate_token_config(cfg: TokenConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.name, str) or not cfg.name.strip():
        raise ValueError("name must be a non-empty string")

    if not isinstance(cfg.symbol, str) or not cfg.symbol.strip():
        raise ValueError("symbol must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if int(cfg.decimals) < 0:
        raise ValueError(f"decimals must be >= 0; got: {cfg.decimals}")

    if int(cfg.max_supply) <= 0:
        raise ValueError(f"max_supply must be > 0; got: {cfg.max_supply}")

    if int(cfg.initial_supply) < 0:
        raise ValueError(f"initial_supply must be >= 0; got: {cfg.initial_supply}")

    if not isinstance(cfg.owner, str) or not cfg.owner.strip():
        raise ValueError("owner must be a non-empty string")

    names = set(cfg.pools.keys())
    if names != set(C.POOL_NAMES):
        raise ValueError(f"pools must be exactly {sorted(C.POOL_NAMES)}; got: {sorted(names)}")

    allocated = 0
    for name, pc in cfg.pools.items():
        if int(pc.allocation) < 0:
            raise ValueError(f"pool {name!r} allocation must be >= 0; got: {pc.allocation}")
        try:
            validate_policy(pc.policy)
        except ValueError as e:
            raise ValueError(f"pool {name!r}: {e}") from None
        allocated += int(pc.allocation)

    if allocated + int(cfg.initial_supply) > int(cfg.max_supply):
        raise ValueError(
            "pool allocations plus initial_supply exceed max_supply: "
            f"{allocated} + {cfg.initial_supply} > {cfg.max_supply}"
        )

    st = cfg.staking
    if not isinstance(st.address, str) or not st.address.strip():
        raise ValueError("staking.address must be a non-empty string")
    if int(st.reward_rate_bps) < 0:
        raise ValueError(f"staking.reward_rate_bps must be >= 0; got: {st.reward_rate_bps}")
    if int(st.withdraw_cliff_s) < 0:
        raise ValueError(f"staking.withdraw_cliff_s must be >= 0; got: {st.withdraw_cliff_s}")


def _read_raw(p: Path) -> Any:
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    return json.loads(text)


def _pools_from_raw(raw: Any, defaults: Mapping[str, PoolConfig]) -> Dict[str, PoolConfig]:
    out = dict(defaults)
    if raw is None:
        return out
    if not isinstance(raw, dict):
        raise ValueError("pools must be an object keyed by pool name")
    for name, rec in raw.items():
        if not isinstance(rec, dict):
            raise ValueError(f"pool {name!r} must be an object")
        base = out.get(str(name))
        allocation = _as_int(rec.get("allocation"), base.allocation if base else 0)
        if "policy" in rec:
            policy = policy_from_json(rec.get("policy"))
        elif base is not None:
            policy = base.policy
        else:
            raise ValueError(f"pool {name!r} needs a policy")
        out[str(name)] = PoolConfig(allocation=allocation, policy=policy)
    return out


def read_token_config_file(path: str) -> TokenConfig:
    p = Path(path)
    raw = _read_raw(p)
    if not isinstance(raw, dict):
        raise ValueError("token config must be a JSON/YAML object")

    d = default_token_config()
    st_raw = raw.get("staking") if isinstance(raw.get("staking"), dict) else {}

    cfg = TokenConfig(
        name=_as_str(raw.get("name"), d.name),
        symbol=_as_str(raw.get("symbol"), d.symbol),
        decimals=_as_int(raw.get("decimals"), d.decimals),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        max_supply=_as_int(raw.get("max_supply"), d.max_supply),
        initial_supply=_as_int(raw.get("initial_supply"), d.initial_supply),
        owner=_as_str(raw.get("owner"), d.owner),
        genesis_time=_as_opt_int(raw.get("genesis_time")),
        pools=_pools_from_raw(raw.get("pools"), d.pools),
        staking=StakingConfig(
            address=_as_str(st_raw.get("address"), d.staking.address),
            reward_rate_bps=_as_int(st_raw.get("reward_rate_bps"), d.staking.reward_rate_bps),
            withdraw_cliff_s=_as_int(st_raw.get("withdraw_cliff_s"), d.staking.withdraw_cliff_s),
        ),
        register_staking_engine=bool(raw.get("register_staking_engine", d.register_staking_engine)),
        log_level=_as_str(raw.get("log_level"), d.log_level),
    )

    validate_token_config(cfg)
    return cfg


def load_token_config(*, config_path: Optional[str] = None) -> TokenConfig:
    p = config_path or os.environ.get("REMIT_TOKEN_CONFIG_PATH")
    if p:
        cfg = read_token_config_file(p)
    else:
        cfg = default_token_config()

    # REMIT_MODE / REMIT_LOG_LEVEL override the file so one config can serve several deployments.
    mode = os.environ.get("REMIT_MODE")
    if mode and mode.strip():
        cfg = replace(cfg, mode=mode.strip().lower())
    level = os.environ.get("REMIT_LOG_LEVEL")
    if level and level.strip():
        cfg = replace(cfg, log_level=level.strip().upper())

    validate_token_config(cfg)
    return cfg


def token_config_to_json(cfg: TokenConfig) -> Json:
    return {
        "name": cfg.name,
        "symbol": cfg.symbol,
        "decimals": int(cfg.decimals),
        "mode": cfg.mode,
        "max_supply": int(cfg.max_supply),
        "initial_supply": int(cfg.initial_supply),
        "owner": cfg.owner,
        "genesis_time": cfg.genesis_time,
        "pools": {
            name: {"allocation": int(pc.allocation), "policy": policy_to_json(pc.policy)}
            for name, pc in cfg.pools.items()
        },
        "staking": {
            "address": cfg.staking.address,
            "reward_rate_bps": int(cfg.staking.reward_rate_bps),
            "withdraw_cliff_s": int(cfg.staking.withdraw_cliff_s),
        },
        "register_staking_engine": bool(cfg.register_staking_engine),
        "log_level": cfg.log_level,
    }
