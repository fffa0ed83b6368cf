from __future__ import annotations

import time

from fastapi import APIRouter, Request

from remit.api.routes_public_parts.common import _mode

router = APIRouter()


def _now_ms() -> int:
    return int(time.time() * 1000)


@router.get("/health")
def v1_health(request: Request) -> dict[str, object]:
    # health must never crash
    sys_ = getattr(request.app.state, "system", None)
    symbol = None
    last_time = None
    if sys_ is not None:
        symbol = sys_.cfg.symbol
        last_time = sys_.now
    return {
        "ok": True,
        "service": "remit-ledger",
        "version": "v1",
        "ts_ms": _now_ms(),
        "mode": _mode(request),
        "symbol": symbol,
        "ledger_time": last_time,
        "ready": sys_ is not None,
    }
