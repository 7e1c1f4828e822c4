from __future__ import annotations
import json
import logging
from datetime import datetime, timezone

ROOT_LOGGER = "vulcano"

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # Structured fields passed via extra=
        for key in ("backend", "family", "path", "cmd", "exit_status", "error"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload)

def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    # Handler and level live on the root vulcano logger; children propagate to it.
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(JsonFormatter())
        root.addHandler(h)
        root.setLevel(logging.INFO)
    return logging.getLogger(name)
