"""Logging setup for the form service.

Production emits one JSON object per record; development prints colored
lines. Session code logs with ``extra={"form_id": ..., "session_id": ...}``
so that one respondent's fill-in can be followed across records.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from formflow.config import get_settings

# Fields that identify the form and respondent session a record belongs to
CONTEXT_FIELDS = ("form_id", "session_id")

# Attributes every LogRecord has; anything else arrived through extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render records as JSON for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Colored single-line output for local runs."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        line = f"{color}[{record.levelname:8}]{self.RESET} {record.name:30} - {record.getMessage()}"

        context = " ".join(
            f"{field}={getattr(record, field)}" for field in CONTEXT_FIELDS if hasattr(record, field)
        )
        if context:
            line += f" [{context}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def setup_logging() -> None:
    """Install a single stdout handler on the root logger.

    The formatter follows ``Settings.environment``; the level follows
    ``Settings.log_level``.
    """
    settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if settings.is_production else DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.log_level)

    logging.getLogger(__name__).info(
        f"Logging configured - Environment: {settings.environment}, Level: {settings.log_level}"
    )


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass ``__name__``)."""
    return logging.getLogger(name)
