from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone

from bistro.core.request_context import get_actor, get_request_id

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Stripe keys and client secrets must never reach the log stream
_REDACTIONS = (
    re.compile(r"\b((?:sk|rk)_(?:live|test)_)\w+"),
    re.compile(r"\b(pi_\w+_secret_)\w+"),
    re.compile(r"((?:client_secret|secret|password|token)\s*[:=]\s*)[^\s\",}]+", re.IGNORECASE),
)

# Extra attributes copied from the record when a caller passes them
_OPTIONAL_FIELDS = ("endpoint", "method", "status_code", "duration_ms", "order_id", "feed")


def redact(text: str) -> str:
    for pattern in _REDACTIONS:
        text = pattern.sub(r"\1***", text)
    return text


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": get_request_id(),
            "actor": get_actor(),
            "message": redact(record.getMessage()),
        }
        entry.update(
            (field, getattr(record, field)) for field in _OPTIONAL_FIELDS if getattr(record, field, None) is not None
        )
        if record.exc_info:
            entry["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(LOG_LEVEL)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(LOG_LEVEL)
