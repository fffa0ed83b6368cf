# src/remit/api/__main__.py
from __future__ import annotations

"""Serve the Remit ledger over HTTP: `python -m remit.api` or `remit-api`.

Env:
  REMIT_API_HOST / REMIT_API_PORT   bind address (default 127.0.0.1:8080)
  REMIT_LOG_LEVEL                   uvicorn log level as well as the JSONL event level
  REMIT_TOKEN_CONFIG_PATH, REMIT_MODE, ... are read by the token config loader
"""

import os

import uvicorn

from remit.env import load_dotenv_if_present


def main() -> None:
    # REMIT_* from .env must be in place before the token config is loaded.
    load_dotenv_if_present()

    from remit.api.app import create_app

    host = os.getenv("REMIT_API_HOST", "127.0.0.1")
    port = int(os.getenv("REMIT_API_PORT", "8080"))
    level = (os.getenv("REMIT_LOG_LEVEL") or "INFO").strip().lower()

    # One process owns the ledger state; a second worker would fork it.
    uvicorn.run(create_app(), host=host, port=port, log_level=level, workers=1)


if __name__ == "__main__":
    main()
