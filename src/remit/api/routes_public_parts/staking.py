from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request

from remit.api.routes_public_parts.common import Json, _now, _system, _view
from remit.api.schemas import StakeRequest

router = APIRouter()


@router.get("/staking")
def v1_staking(request: Request) -> Json:
    view = _view(request)
    return {"ok": True, **view.staking_summary(), "holders": view.holders()}


@router.get("/staking/{staker}")
def v1_staking_position(staker: str, request: Request, now: Optional[int] = None) -> Json:
    sys_ = _system(request)
    t = _now(request, now)
    return {
        "ok": True,
        "staker": staker,
        "position": sys_.staking_position(staker),
        "pending_rewards": sys_.pending_rewards(staker, t),
        "now": t,
    }


@router.post("/staking/deposit")
def v1_staking_deposit(body: StakeRequest, request: Request) -> Json:
    sys_ = _system(request)
    return {"ok": True, **sys_.deposit(body.staker, body.amount, now=_now(request, body.now))}


@router.post("/staking/withdraw")
def v1_staking_withdraw(body: StakeRequest, request: Request) -> Json:
    sys_ = _system(request)
    return {"ok": True, **sys_.withdraw(body.staker, body.amount, now=_now(request, body.now))}
