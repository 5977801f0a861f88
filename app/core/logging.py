"""JSON logging to stdout.

Every record becomes one JSON object. Request and outbound-call metadata passed via
`extra=` is lifted into top-level keys; records without it simply carry nulls.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import UTC, datetime
from typing import Any


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Output key -> LogRecord attribute (set through `extra=`).
_EXTRA_FIELDS: dict[str, str] = {
    "request_id": "request_id",
    "method": "http_method",
    "path": "request_path",
    "status_code": "status_code",
    "duration_ms": "duration_ms",
    "attempt": "attempt",
    "wait_seconds": "wait_seconds",
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, attr in _EXTRA_FIELDS.items():
            payload[key] = getattr(record, attr, None)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def setup_logging() -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": JsonFormatter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": LOG_LEVEL, "handlers": ["stdout"]},
        }
    )
