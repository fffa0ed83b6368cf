from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from remit.runtime.errors import CALLER_NOT_STAKING_ENGINE, UNKNOWN_POOL, TokenError

_STATUS_BY_CODE = {
    CALLER_NOT_STAKING_ENGINE: 403,
    UNKNOWN_POOL: 404,
}


@dataclass
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_token_error(e: TokenError) -> "ApiError":
        details = e.details if isinstance(e.details, dict) else ({"details": e.details} if e.details is not None else {})
        return ApiError(_STATUS_BY_CODE.get(e.code, 400), e.code, e.reason, details)


def _error_body(err: ApiError) -> Dict[str, Any]:
    return {"ok": False, "error": {"code": err.code, "message": err.message, "details": err.details}}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(_request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(TokenError)
    async def _token_error(_request: Request, exc: TokenError) -> JSONResponse:
        err = ApiError.from_token_error(exc)
        return JSONResponse(status_code=err.status_code, content=_error_body(err))
