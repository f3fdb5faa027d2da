"""
Logging setup for the user directory service.

Every line carries the same small set of service fields, filled in from
``extra=`` where a call site has them:

    logger.info("User registered", extra={"user_id": user.id})

Production writes one JSON object per line; development writes
``key=value`` pairs after the message. The request id comes from the
context var set by RequestLogMiddleware.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Fixed output schema, in output order
SERVICE_FIELDS = (
    "request_id",
    "user_id",
    "code",
    "method",
    "path",
    "status_code",
    "duration_ms",
)


def service_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Service fields present on a record, in schema order."""
    fields = {}
    for name in SERVICE_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            fields[name] = value
    return fields


class RequestContextFilter(logging.Filter):
    """Copy the current request id onto records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record with a fixed set of keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name, value in service_fields(record).items():
            entry[name] = value if isinstance(value, (str, int, float)) else str(value)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class KeyValueFormatter(logging.Formatter):
    """Readable line for terminals: message followed by key=value pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-5s [%(name)s] %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = " ".join(f"{k}={v}" for k, v in service_fields(record).items())
        if not pairs:
            return line
        # Keep any traceback below the fields
        head, sep, tail = line.partition("\n")
        return f"{head} {pairs}{sep}{tail}"


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        log_level: Level name; unknown names fall back to INFO
        environment: 'production' selects JSON output
        debug: Forces DEBUG
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else KeyValueFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # Per-request lines come from RequestLogMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
