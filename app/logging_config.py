"""Structured JSON logging configuration."""

import json
import logging
import sys
from datetime import datetime, timezone

LOGGER_NAME = "jokes_api"

# Extra fields copied from log records into the JSON payload
EXTRA_FIELDS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "client_ip",
    "user_agent",
    "response_time_ms",
    "event_type",
    "joke_id",
    "genre",
    "fields",
    "key_count",
    "joke_count",
    "username",
    "failure_count",
    "window_seconds",
    "error",
)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the application logger.

    Modules log through children of ``jokes_api`` (``jokes_api.store`` and
    so on) and inherit this handler.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        The configured ``jokes_api`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Prevent duplicate handlers on reload
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return logger
