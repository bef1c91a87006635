"""
Structured JSON logging for the student registry.

Every log line is one JSON object on stdout. Entries are grouped into
channels (http, db, registry) and carry the id of the HTTP request that
produced them, so a single request can be followed through the logs.
"""

import logging
import json
import os
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

# Id of the request currently being served; empty outside a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CHANNELS = ("http", "db", "registry")


class StructuredJsonFormatter(logging.Formatter):
    """
    Render a LogRecord as a single JSON line.

    Keys: timestamp (UTC, millisecond precision), level, message, channel,
    context (request_id plus any business ids such as student_id) and
    extra (timings, error text and other metadata).
    """

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        entry = {
            "timestamp": now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", None) or _channel_from_name(record.name),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", None) or {})
            },
            "extra": getattr(record, "extra_data", None) or {}
        }
        if record.exc_info:
            entry["extra"]["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _channel_from_name(name: str) -> str:
    return name.rsplit(".", 1)[-1] if "." in name else "app"


def setup_logging() -> logging.Logger:
    """
    Install the JSON formatter on the root logger and set channel levels.

    Safe to call more than once; the root handler list is replaced
    rather than appended to.
    """
    level = getattr(logging, LOG_LEVEL, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logging.getLogger(f"app.{channel}").setLevel(level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for a channel (http, db or registry)."""
    return logging.getLogger(f"app.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None):
    """
    Emit one structured entry.

    Args:
        logger: Channel logger from get_logger()
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        message: Human-readable message
        context: Business ids, e.g. {"student_id": ...}
        extra_data: Metadata, e.g. {"duration_ms": 1.2, "error": "..."}
    """
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        message,
        extra={
            "context": context or {},
            "extra_data": extra_data or {},
            "channel": _channel_from_name(logger.name),
        }
    )


def generate_request_id() -> str:
    """New UUID4 string for request tracing."""
    return str(uuid.uuid4())
