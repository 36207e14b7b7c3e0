import json
import logging
import time
from typing import Any, Dict


def _now_ms() -> int:
    return int(time.time() * 1000)


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    """Emit a single JSON line describing a committed vault operation."""
    payload: Dict[str, Any] = {"ts_ms": _now_ms(), "event": event}
    payload.update(fields)
    logger.info(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
