from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request

from remit.api.routes_public_parts.common import Json, _caller, _now, _system
from remit.api.schemas import PoolMintRequest

router = APIRouter()


@router.get("/pools")
def v1_pools(request: Request, now: Optional[int] = None) -> Json:
    sys_ = _system(request)
    t = _now(request, now)
    return {
        "ok": True,
        "staking_engine": sys_.staking_engine(),
        "pools": [sys_.pool_info(p, t) for p in sys_.pool_names()],
    }


@router.get("/pools/{pool}")
def v1_pool_get(pool: str, request: Request, now: Optional[int] = None) -> Json:
    sys_ = _system(request)
    return {"ok": True, **sys_.pool_info(pool, _now(request, now))}


@router.post("/pools/{pool}/mint")
def v1_pool_mint(pool: str, body: PoolMintRequest, request: Request) -> Json:
    sys_ = _system(request)
    t = _now(request, body.now)
    return {"ok": True, **sys_.mint_from_pool(pool, body.to, body.amount, now=t, caller=_caller(request, body.caller))}
