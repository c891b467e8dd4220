"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (tool_name, error_code, user_id, store_path) surfaced when present
    - Logs go to stderr: stdout belongs to the stdio transport

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called on startup from main(); re-running replaces its own
      handler instead of stacking duplicates
"""

import logging
import json
import sys
from datetime import datetime, timezone

_HANDLER_TAG = "_user_registry_handler"

_EXTRA_FIELDS = (
    "tool_name", "error_code", "user_id", "store_path", "attempt",
    "input_tokens", "output_tokens",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the server process. Safe to call more than once."""
    for existing in list(logging.root.handlers):
        if getattr(existing, _HANDLER_TAG, False):
            logging.root.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    setattr(handler, _HANDLER_TAG, True)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
