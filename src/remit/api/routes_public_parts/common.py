from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import Request

from remit.api.errors import ApiError
from remit.ledger.state import TokenView
from remit.runtime.errors import CALLER_NOT_STAKING_ENGINE
from remit.runtime.system import TokenSystem

Json = Dict[str, Any]


def _system(request: Request) -> TokenSystem:
    sys_ = getattr(request.app.state, "system", None)
    if sys_ is None:
        raise ApiError.internal("not_ready", "token system not attached to app.state", {})
    return sys_


def _view(request: Request) -> TokenView:
    return _system(request).view()


def _mode(request: Request) -> str:
    return str(getattr(request.app.state, "mode", "prod") or "prod").strip().lower()


def _now(request: Request, client_now: Optional[int]) -> int:
    """Resolve the clock for a time-dependent call.

    The node's wall clock is authoritative in prod; dev/testnet accept a
    client-supplied `now` so scenarios can be replayed deterministically.
    """
    if client_now is None:
        return int(time.time())
    if _mode(request) == "prod":
        raise ApiError.forbidden(
            "client_clock_forbidden",
            "client-supplied 'now' is only accepted outside prod mode",
            {"now": client_now},
        )
    return int(client_now)


def _caller(request: Request, client_caller: Optional[str]) -> Optional[str]:
    """Resolve the caller identity for a pool mint.

    The stake-farm pool only mints for the registered staking engine. A caller
    named in the request body is unauthenticated, so prod refuses it outright
    and the engine's rewards can only be minted through /v1/staking.
    """
    if client_caller is None:
        return None
    if _mode(request) == "prod":
        raise ApiError.forbidden(
            CALLER_NOT_STAKING_ENGINE,
            "client-supplied 'caller' is only accepted outside prod mode",
            {"caller": client_caller},
        )
    return client_caller
