"""Structured JSON Logging with Correlation ID Support

Every line is one JSON object. A sync run sets a correlation id so all lines
it writes, across services, can be grouped.
"""
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional
from contextvars import ContextVar

from ..config.settings import settings
from .time import utc_now, format_iso


correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

LOG_FILE = "permit_sync.log"
ERROR_LOG_FILE = "error.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Extra record attributes copied into the JSON payload
EXTRA_FIELDS = (
    "system_id",
    "record_id",
    "permit_id",
    "tracking_id",
    "status_key",
    "error_type",
    "error",
    "checked",
    "fetched",
    "failed",
    "updated",
    "unchanged",
    "skipped",
    "duration_ms",
)

# Libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "pymongo", "apscheduler")


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": format_iso(utc_now()),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Explicit extra wins over the context
        correlation_id = getattr(record, "correlation_id", None) or correlation_id_var.get()
        if correlation_id:
            log_obj["correlation_id"] = correlation_id

        log_obj.update({field: getattr(record, field) for field in EXTRA_FIELDS if hasattr(record, field)})

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def _rotating_handler(filename: str, level: int = logging.NOTSET) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        os.path.join(settings.logs_path, filename),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def setup_logging() -> None:
    """
    Route all logging through the JSON formatter

    Console always; rotating files under settings.logs_path when
    settings.log_to_file is set, with errors also copied to their own file.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))
    root_logger.handlers.clear()

    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_to_file:
        os.makedirs(settings.logs_path, exist_ok=True)
        handlers.append(_rotating_handler(LOG_FILE))
        handlers.append(_rotating_handler(ERROR_LOG_FILE, logging.ERROR))

    formatter = JsonFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set correlation ID in context; None clears it"""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()
