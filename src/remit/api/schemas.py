from __future__ import annotations

"""Pydantic request schemas for the public API.

Amounts are integer base units (1 REMIT = 1e18). Clients may send them as JSON
numbers or decimal strings; both are coerced to int.

`now` is optional on time-dependent calls. It is honoured only outside
production mode; otherwise the node's wall clock is used.
"""

from typing import Optional

from pydantic import BaseModel, Field


class TransferRequest(BaseModel):
    sender: str = Field(..., alias="from", description="Debited account")
    to: str = Field(..., description="Credited account")
    amount: int = Field(..., ge=0, description="Amount in base units")

    model_config = {"populate_by_name": True}


class ApproveRequest(BaseModel):
    owner: str = Field(..., description="Account granting the allowance")
    spender: str = Field(..., description="Account allowed to spend")
    amount: int = Field(..., ge=0, description="Allowance in base units")


class TransferFromRequest(BaseModel):
    spender: str = Field(..., description="Account spending the allowance")
    owner: str = Field(..., alias="from", description="Debited account")
    to: str = Field(..., description="Credited account")
    amount: int = Field(..., ge=0, description="Amount in base units")

    model_config = {"populate_by_name": True}


class MintRequest(BaseModel):
    to: str = Field(..., description="Credited account")
    amount: int = Field(..., ge=0, description="Amount in base units")


class BurnRequest(BaseModel):
    account: str = Field(..., alias="from", description="Debited account")
    amount: int = Field(..., ge=0, description="Amount in base units")

    model_config = {"populate_by_name": True}


class PoolMintRequest(BaseModel):
    to: str = Field(..., description="Credited account")
    amount: int = Field(..., ge=0, description="Amount in base units")
    caller: Optional[str] = Field(default=None, description="Caller identity for stake_farm (non-prod only)")
    now: Optional[int] = Field(default=None, description="Unix seconds (non-prod only)")


class StakeRequest(BaseModel):
    staker: str = Field(..., description="Staking account")
    amount: int = Field(..., ge=0, description="Amount in base units")
    now: Optional[int] = Field(default=None, description="Unix seconds (non-prod only)")
