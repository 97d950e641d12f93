"""Log output for the rental admin.

Auth and session events attach who and where through ``extra=``::

    logger.warning("Failed login", extra={"username": name, **request_log_context(request)})

Both formatters render those context fields next to the message: as keys of
the JSON object in production, as trailing ``key=value`` pairs in development.
"""

import json
import logging
import sys
from typing import Any, Literal

# Record attributes copied into the output when a call site supplies them
CONTEXT_FIELDS = ("user_id", "username", "client_ip", "method", "path")

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context fields at the top level."""

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """Single readable line with context appended as key=value pairs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = record_context(record)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


def setup_logging(
    level: str = "INFO",
    format_type: Literal["structured", "dev"] = "dev",
) -> None:
    """Route all logging to stdout.

    Args:
        level: Root log level name
        format_type: 'structured' for JSON lines, 'dev' for readable output
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if format_type == "structured" else DevFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(level.upper())

    noisy_level = logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    logging.getLogger(__name__).debug("Logging configured: level=%s, format=%s", level, format_type)
