"""Structured Logging — JSON and text formatters sharing one set of extra fields.

Invariants:
    - Every line carries timestamp, level, logger name and message
    - CONTEXT_FIELDS passed via `extra=` are surfaced by both formats
    - setup_logging is idempotent: calling it again replaces its own handler
      instead of stacking a second one
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = ("user_id", "effective_from", "error_code", "path", "phase")

# Libraries that log per statement / per request at INFO
_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "uvicorn.access")


def _context(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable line with context appended as key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


class _PayRatesHandler(logging.StreamHandler):
    pass


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the root handler for the configured format."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _PayRatesHandler)]:
        root.removeHandler(existing)

    handler = _PayRatesHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
