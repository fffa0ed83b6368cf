from __future__ import annotations

from dataclasses import dataclass, field
import copy
from typing import Any, Dict, List, Optional


Json = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class TokenView:
    """
    Immutable read-only snapshot of the token state, used by the API layer.
    """

    token: Dict[str, Any] = field(default_factory=dict)
    balances: Dict[str, Any] = field(default_factory=dict)
    allowances: Dict[str, Any] = field(default_factory=dict)
    pools: Dict[str, Any] = field(default_factory=dict)
    staking: Dict[str, Any] = field(default_factory=dict)
    time: int = 0

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "TokenView":
        def _d(key: str) -> Dict[str, Any]:
            v = state.get(key)
            return copy.deepcopy(v) if isinstance(v, dict) else {}

        return cls(
            token=_d("token"),
            balances=_d("balances"),
            allowances=_d("allowances"),
            pools=_d("pools"),
            staking=_d("staking"),
            time=int(state.get("time", 0) or 0),
        )

    def to_state(self) -> Dict[str, Any]:
        return {
            "token": copy.deepcopy(self.token),
            "balances": copy.deepcopy(self.balances),
            "allowances": copy.deepcopy(self.allowances),
            "pools": copy.deepcopy(self.pools),
            "staking": copy.deepcopy(self.staking),
            "time": int(self.time),
        }

    def balance_of(self, account: str) -> int:
        try:
            return int(self.balances.get(account, 0))
        except Exception:
            return 0

    def allowance(self, owner: str, spender: str) -> int:
        per_owner = self.allowances.get(owner)
        if not isinstance(per_owner, dict):
            return 0
        try:
            return int(per_owner.get(spender, 0))
        except Exception:
            return 0

    def total_supply(self) -> int:
        try:
            return int(self.token.get("total_supply", 0))
        except Exception:
            return 0

    def token_info(self) -> Json:
        return {
            "name": str(self.token.get("name", "")),
            "symbol": str(self.token.get("symbol", "")),
            "decimals": int(self.token.get("decimals", 0) or 0),
            "total_supply": self.total_supply(),
            "max_supply": int(self.token.get("max_supply", 0) or 0),
        }

    def pool_record(self, pool: str) -> Optional[Json]:
        registry = self.pools.get("registry")
        if not isinstance(registry, dict):
            return None
        rec = registry.get(pool)
        return rec if isinstance(rec, dict) else None

    def pool_remaining(self, pool: str) -> int:
        rec = self.pool_record(pool)
        if rec is None:
            return 0
        try:
            return int(rec.get("remaining", 0))
        except Exception:
            return 0

    def staking_engine(self) -> str:
        v = self.pools.get("staking_engine")
        return str(v).strip() if v is not None else ""

    def holders(self) -> List[str]:
        """Stakers with strictly positive principal, sorted."""
        positions = self.staking.get("positions")
        if not isinstance(positions, dict):
            return []
        out: List[str] = []
        for staker, pos in positions.items():
            if not isinstance(pos, dict):
                continue
            try:
                if int(pos.get("deposited_tokens", 0)) > 0:
                    out.append(str(staker))
            except Exception:
                continue
        return sorted(out)

    def staking_summary(self) -> Json:
        return {
            "address": str(self.staking.get("address", "")),
            "registered": self.staking_engine() == str(self.staking.get("address", "")),
            "reward_rate_bps": int(self.staking.get("reward_rate_bps", 0) or 0),
            "withdraw_cliff_s": int(self.staking.get("withdraw_cliff_s", 0) or 0),
            "number_of_holders": int(self.staking.get("number_of_holders", 0) or 0),
            "total_claimed_rewards": int(self.staking.get("total_claimed_rewards", 0) or 0),
        }
