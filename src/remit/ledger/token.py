# src/remit/ledger/token.py
from __future__ import annotations

"""Fungible-token ledger primitives.

State layout (all amounts are integer base units):

  state["token"]      = {"name", "symbol", "decimals", "max_supply", "total_supply"}
  state["balances"]   = {account_id: int}
  state["allowances"] = {owner: {spender: int}}
  state["events"]     = [ {"event": "Transfer", ...}, ... ]   (outbox, drained by the system)

Every operation validates fully before mutating anything, so a raised
LedgerError never leaves a half-applied change behind.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from remit.ledger.constants import MAX_SUPPLY, NULL_ACCOUNT, TOKEN_DECIMALS, TOKEN_NAME, TOKEN_SYMBOL
from remit.runtime.errors import (
    INSUFFICIENT_ALLOWANCE,
    INSUFFICIENT_BALANCE,
    INVALID_ACCOUNT,
    INVALID_AMOUNT,
    SUPPLY_CAP_EXCEEDED,
    TokenError,
)

Json = Dict[str, Any]


@dataclass
class LedgerError(TokenError):
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


def is_null_account(account: Any) -> bool:
    if not isinstance(account, str):
        return True
    s = account.strip()
    return not s or s.lower() == NULL_ACCOUNT


def require_amount(amount: Any) -> int:
    """Amounts are non-negative ints; bools are rejected even though they are ints."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise LedgerError(INVALID_AMOUNT, "amount_not_int", {"amount": repr(amount)})
    if amount < 0:
        raise LedgerError(INVALID_AMOUNT, "amount_negative", {"amount": amount})
    return amount


def _require_account(account: Any, role: str) -> str:
    if is_null_account(account):
        raise LedgerError(INVALID_ACCOUNT, f"{role}_is_null_account", {role: account})
    return str(account).strip()


def ensure_token_root(state: Json) -> Json:
    tok = state.get("token")
    if not isinstance(tok, dict):
        tok = {}
        state["token"] = tok
    tok.setdefault("name", TOKEN_NAME)
    tok.setdefault("symbol", TOKEN_SYMBOL)
    tok.setdefault("decimals", TOKEN_DECIMALS)
    tok.setdefault("max_supply", MAX_SUPPLY)
    tok.setdefault("total_supply", 0)
    return tok


def _ensure_balances(state: Json) -> Json:
    bal = state.get("balances")
    if not isinstance(bal, dict):
        bal = {}
        state["balances"] = bal
    return bal


def _ensure_allowances(state: Json) -> Json:
    al = state.get("allowances")
    if not isinstance(al, dict):
        al = {}
        state["allowances"] = al
    return al


def _ensure_events(state: Json) -> List[Json]:
    ev = state.get("events")
    if not isinstance(ev, list):
        ev = []
        state["events"] = ev
    return ev


def emit_event(state: Json, event: str, **fields: Any) -> Json:
    rec: Json = {"event": str(event)}
    rec.update(fields)
    _ensure_events(state).append(rec)
    return rec


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def balance_of(state: Json, account: str) -> int:
    return _as_int(_as_dict(state.get("balances")).get(str(account)), 0)


def allowance(state: Json, owner: str, spender: str) -> int:
    per_owner = _as_dict(_as_dict(state.get("allowances")).get(str(owner)))
    return _as_int(per_owner.get(str(spender)), 0)


def total_supply(state: Json) -> int:
    return _as_int(ensure_token_root(state).get("total_supply"), 0)


def max_supply(state: Json) -> int:
    return _as_int(ensure_token_root(state).get("max_supply"), MAX_SUPPLY)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def _credit(state: Json, account: str, amount: int) -> None:
    bal = _ensure_balances(state)
    bal[account] = _as_int(bal.get(account), 0) + int(amount)


def _debit(state: Json, account: str, amount: int) -> None:
    bal = _ensure_balances(state)
    left = _as_int(bal.get(account), 0) - int(amount)
    if left:
        bal[account] = left
    else:
        bal.pop(account, None)


def check_mint(state: Json, to: str, amount: int) -> str:
    to_s = _require_account(to, "to")
    amt = require_amount(amount)
    supply = total_supply(state)
    cap = max_supply(state)
    if supply + amt > cap:
        raise LedgerError(
            SUPPLY_CAP_EXCEEDED,
            "total_supply_would_exceed_max_supply",
            {"total_supply": supply, "amount": amt, "max_supply": cap},
        )
    return to_s


def mint(state: Json, to: str, amount: int) -> Json:
    to_s = check_mint(state, to, amount)
    tok = ensure_token_root(state)
    _credit(state, to_s, amount)
    tok["total_supply"] = _as_int(tok.get("total_supply"), 0) + int(amount)
    emit_event(state, "Transfer", **{"from": NULL_ACCOUNT, "to": to_s, "value": int(amount)})
    return {"applied": "MINT", "to": to_s, "amount": int(amount), "total_supply": int(tok["total_supply"])}


def burn(state: Json, from_: str, amount: int) -> Json:
    from_s = _require_account(from_, "from")
    amt = require_amount(amount)
    have = balance_of(state, from_s)
    if amt > have:
        raise LedgerError(INSUFFICIENT_BALANCE, "burn_exceeds_balance", {"account": from_s, "balance": have, "amount": amt})

    tok = ensure_token_root(state)
    _debit(state, from_s, amt)
    tok["total_supply"] = _as_int(tok.get("total_supply"), 0) - amt
    emit_event(state, "Transfer", **{"from": from_s, "to": NULL_ACCOUNT, "value": amt})
    return {"applied": "BURN", "from": from_s, "amount": amt, "total_supply": int(tok["total_supply"])}


def check_transfer(state: Json, sender: str, to: str, amount: int) -> tuple[str, str, int]:
    sender_s = _require_account(sender, "from")
    to_s = _require_account(to, "to")
    amt = require_amount(amount)
    have = balance_of(state, sender_s)
    if amt > have:
        raise LedgerError(INSUFFICIENT_BALANCE, "transfer_exceeds_balance", {"account": sender_s, "balance": have, "amount": amt})
    return sender_s, to_s, amt


def _move(state: Json, sender: str, to: str, amount: int) -> None:
    if amount:
        _debit(state, sender, amount)
        _credit(state, to, amount)
    emit_event(state, "Transfer", **{"from": sender, "to": to, "value": int(amount)})


def transfer(state: Json, sender: str, to: str, amount: int) -> Json:
    sender_s, to_s, amt = check_transfer(state, sender, to, amount)
    _move(state, sender_s, to_s, amt)
    return {"applied": "TRANSFER", "from": sender_s, "to": to_s, "amount": amt}


def approve(state: Json, owner: str, spender: str, amount: int) -> Json:
    owner_s = _require_account(owner, "owner")
    spender_s = _require_account(spender, "spender")
    amt = require_amount(amount)

    al = _ensure_allowances(state)
    per_owner = al.get(owner_s)
    if not isinstance(per_owner, dict):
        per_owner = {}
        al[owner_s] = per_owner
    per_owner[spender_s] = amt

    emit_event(state, "Approval", owner=owner_s, spender=spender_s, value=amt)
    return {"applied": "APPROVE", "owner": owner_s, "spender": spender_s, "amount": amt}


def check_transfer_from(state: Json, spender: str, owner: str, to: str, amount: int) -> tuple[str, str, str, int]:
    """Validation half of transfer_from: balance first, then allowance."""
    spender_s = _require_account(spender, "spender")
    owner_s, to_s, amt = check_transfer(state, owner, to, amount)
    granted = allowance(state, owner_s, spender_s)
    if amt > granted:
        raise LedgerError(
            INSUFFICIENT_ALLOWANCE,
            "transfer_exceeds_allowance",
            {"owner": owner_s, "spender": spender_s, "allowance": granted, "amount": amt},
        )
    return spender_s, owner_s, to_s, amt


def transfer_from(state: Json, spender: str, owner: str, to: str, amount: int) -> Json:
    spender_s, owner_s, to_s, amt = check_transfer_from(state, spender, owner, to, amount)
    al = _ensure_allowances(state)
    per_owner = al.setdefault(owner_s, {})
    per_owner[spender_s] = _as_int(per_owner.get(spender_s), 0) - amt
    _move(state, owner_s, to_s, amt)
    return {"applied": "TRANSFER_FROM", "spender": spender_s, "from": owner_s, "to": to_s, "amount": amt}


__all__ = [
    "LedgerError",
    "allowance",
    "approve",
    "balance_of",
    "burn",
    "check_mint",
    "check_transfer",
    "check_transfer_from",
    "emit_event",
    "ensure_token_root",
    "is_null_account",
    "max_supply",
    "mint",
    "require_amount",
    "total_supply",
    "transfer",
    "transfer_from",
]
