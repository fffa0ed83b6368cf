from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from remit.api.errors import install_error_handlers
from remit.api.routes_public import public_router
from remit.api.structured_logging import RequestLogMiddleware, configure_structured_logging
from remit.runtime.event_log import log_event
from remit.runtime.system import TokenSystem
from remit.runtime.token_config import load_token_config

_log = logging.getLogger("remit.api")


def build_system() -> TokenSystem:
    """Build the TokenSystem for API runtime.

    This wrapper exists so tests can monkeypatch `remit.api.app.build_system`
    without reaching into runtime modules.
    """
    return TokenSystem(load_token_config())


def create_app(*, boot_runtime: bool = True, system: Optional[TokenSystem] = None) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): load token config + build the TokenSystem
      - False: no system attached (routes other than /v1/health answer not_ready)

    system:
      - an already-built TokenSystem to serve (tests); wins over boot_runtime
    """
    if system is None and boot_runtime:
        system = build_system()

    mode = system.cfg.mode if system is not None else load_token_config().mode
    configure_structured_logging(system.cfg.log_level if system is not None else None)

    # Disable docs in production.
    if mode == "prod":
        app = FastAPI(title="Remit Ledger API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="Remit Ledger API")

    app.state.system = system
    app.state.mode = mode

    app.add_middleware(RequestLogMiddleware)
    install_error_handlers(app)
    app.include_router(public_router)

    log_event(_log, "api_created", mode=mode, ready=system is not None)
    return app
