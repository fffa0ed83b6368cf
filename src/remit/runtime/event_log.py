# src/remit/runtime/event_log.py
from __future__ import annotations

"""JSONL event records for the ledger.

Each committed or rejected ledger call becomes one line of JSON:

  {"event": "op_applied", "op": "deposit", "receipt": {...}, "ts_ms": 1700000000000}
  {"event": "op_rejected", "op": "withdraw", "code": "cliff_not_elapsed", ...}

Token amounts are 1e18-scaled ints. They are written as JSON integers and never as
floats, so a log line can be replayed against balances without rounding.
"""

import json
import logging
import time
from typing import Any, Dict

Json = Dict[str, Any]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _render(event: str, fields: Json) -> str:
    payload: Json = {"ts_ms": _now_ms(), "event": str(event)}
    payload.update(fields)
    try:
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        # Non-JSON values in a receipt or error detail: fall back to key=repr pairs.
        parts = [f"event={event}"] + [f"{k}={fields.get(k)!r}" for k in sorted(fields.keys())]
        return " ".join(parts)


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    """Commits, genesis and API lifecycle records."""
    if logger.isEnabledFor(logging.INFO):
        logger.info(_render(event, fields))


def log_warning(logger: logging.Logger, event: str, **fields: Any) -> None:
    """Rejected calls. `fields` carries the TokenError code/reason/details."""
    logger.warning(_render(event, fields))
