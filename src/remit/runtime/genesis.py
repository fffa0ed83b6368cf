# src/remit/runtime/genesis.py
from __future__ import annotations

"""Genesis state construction.

Builds the initial ledger state from a TokenConfig:

  - token metadata and max supply
  - initial supply minted to the owner (out of unallocated headroom)
  - the six pools with their allocations and unlock policies
  - staking parameters, and optionally the staking engine registration
"""

from typing import Any, Dict

from remit.ledger import pools
from remit.ledger import token as ledger
from remit.runtime.state_invariants import ensure_state
from remit.runtime.token_config import TokenConfig, validate_token_config
from remit.staking.engine import ensure_staking_root

Json = Dict[str, Any]


def build_genesis_state(cfg: TokenConfig, *, genesis_time: int) -> Json:
    validate_token_config(cfg)

    state: Json = ensure_state({})
    state["time"] = int(genesis_time)

    tok = ledger.ensure_token_root(state)
    tok["name"] = cfg.name
    tok["symbol"] = cfg.symbol
    tok["decimals"] = int(cfg.decimals)
    tok["max_supply"] = int(cfg.max_supply)
    tok["owner"] = cfg.owner

    if int(cfg.initial_supply) > 0:
        ledger.mint(state, cfg.owner, int(cfg.initial_supply))

    pools.create_pools(
        state,
        {name: (pc.allocation, pc.policy) for name, pc in cfg.pools.items()},
        genesis_time=int(genesis_time),
    )

    st = ensure_staking_root(state)
    st["address"] = cfg.staking.address
    st["reward_rate_bps"] = int(cfg.staking.reward_rate_bps)
    st["withdraw_cliff_s"] = int(cfg.staking.withdraw_cliff_s)

    if cfg.register_staking_engine:
        pools.set_staking_engine(state, cfg.staking.address)

    return state
