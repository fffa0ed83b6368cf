# src/remit/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from remit.api.routes_public_parts.accounts import router as accounts_router
from remit.api.routes_public_parts.health import router as health_router
from remit.api.routes_public_parts.pools import router as pools_router
from remit.api.routes_public_parts.staking import router as staking_router

public_router = APIRouter()

# Versioned API surface
public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(accounts_router, prefix="/v1", tags=["accounts"])
public_router.include_router(pools_router, prefix="/v1", tags=["pools"])
public_router.include_router(staking_router, prefix="/v1", tags=["staking"])
