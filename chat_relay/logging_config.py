"""JSON logging for the chat relay.

Each record is one JSON object per line. Services pass structured fields via
``extra={"context": {...}}``; the notebook and session identifiers found there
are also lifted to the top level so one chat can be followed across the
relay, dispatch and history loggers.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO

CORRELATION_KEYS = ("session_id", "notebook_id")

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            for key in CORRELATION_KEYS:
                if context.get(key):
                    entry[key] = context[key]
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Send all records through one JSON handler on ``stream`` (stdout by default)."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"chat_relay.{name}")


def preview(text: str | None, limit: int = 200) -> str:
    """Shorten a webhook body for log context."""
    if not text:
        return ""
    return text if len(text) <= limit else f"{text[:limit]}..."
