from __future__ import annotations

from fastapi import APIRouter, Request

from remit.api.routes_public_parts.common import Json, _system, _view
from remit.api.schemas import ApproveRequest, BurnRequest, MintRequest, TransferFromRequest, TransferRequest

router = APIRouter()


@router.get("/token")
def v1_token(request: Request) -> Json:
    return {"ok": True, **_view(request).token_info()}


@router.get("/accounts/{account}")
def v1_account_get(account: str, request: Request) -> Json:
    sys_ = _system(request)
    return {
        "ok": True,
        "account": account,
        "balance": sys_.balance_of(account),
        "staking": sys_.staking_position(account),
    }


@router.get("/accounts/{owner}/allowances/{spender}")
def v1_allowance_get(owner: str, spender: str, request: Request) -> Json:
    return {"ok": True, "owner": owner, "spender": spender, "allowance": _system(request).allowance(owner, spender)}


@router.post("/transfer")
def v1_transfer(body: TransferRequest, request: Request) -> Json:
    return {"ok": True, **_system(request).transfer(body.sender, body.to, body.amount)}


@router.post("/approve")
def v1_approve(body: ApproveRequest, request: Request) -> Json:
    return {"ok": True, **_system(request).approve(body.owner, body.spender, body.amount)}


@router.post("/transfer_from")
def v1_transfer_from(body: TransferFromRequest, request: Request) -> Json:
    return {"ok": True, **_system(request).transfer_from(body.spender, body.owner, body.to, body.amount)}


@router.post("/mint")
def v1_mint(body: MintRequest, request: Request) -> Json:
    return {"ok": True, **_system(request).mint(body.to, body.amount)}


@router.post("/burn")
def v1_burn(body: BurnRequest, request: Request) -> Json:
    return {"ok": True, **_system(request).burn(body.account, body.amount)}
