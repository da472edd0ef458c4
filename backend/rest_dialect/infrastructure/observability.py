"""Structured Logging: formatters, request context and setup for the dialect's logs.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Dialect fields (entity, resource_id, error_code, status_code, method, path)
      surfaced when present, in that order
    - setup_logging installs at most one handler: calling it again replaces the previous one

Design Decisions:
    - The library only writes to module loggers; host apps call setup_logging
      once, from their lifespan
    - request_context() is the single place that decides which request
      attributes end up in a log record
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "entity", "resource_id", "error_code", "status_code", "method", "path",
)

_installed: logging.Handler | None = None


def request_context(request) -> dict:
    """Log extras describing the inbound request."""
    return {"method": request.method, "path": request.url.path}


def _extras(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key] for key in EXTRA_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with dialect fields appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if not extras:
            return line
        head, sep, tail = line.partition("\n")
        fields = " ".join(f"{key}={value}" for key, value in extras.items())
        return f"{head} [{fields}]{sep}{tail}"


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging for the application. Returns the installed handler."""
    global _installed
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    if _installed is not None:
        logging.root.removeHandler(_installed)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _installed = handler
    return handler
