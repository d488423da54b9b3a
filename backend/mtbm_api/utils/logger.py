"""Structured JSON Logging with Correlation ID Support

Every record is a single JSON line. Records emitted while a request is in
flight carry that request's correlation id; service code attaches domain
context through ``extra`` (``alert_id``, ``user_id`` ...) and only the
whitelisted keys below are copied into the output.
"""
import json
import logging
import os
import sys
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional, TYPE_CHECKING

from .time import format_iso, utc_now

if TYPE_CHECKING:
    from ..config.settings import Settings


# Set by CorrelationIdMiddleware for the duration of a request
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "pymongo": logging.WARNING,
    "passlib": logging.ERROR,
    "multipart": logging.WARNING,
}


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object"""

    CONTEXT_FIELDS = ("alert_id", "user_id", "actor_email", "action", "status", "message_id", "role")

    def __init__(self, environment: str = "development"):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": format_iso(utc_now()),
            "level": record.levelname,
            "logger": record.name,
            "environment": self.environment,
            "message": record.getMessage(),
        }

        correlation_id = correlation_id_var.get()
        if correlation_id:
            entry["correlation_id"] = correlation_id

        entry.update({
            field: getattr(record, field)
            for field in self.CONTEXT_FIELDS
            if hasattr(record, field)
        })

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _rotating_file(path: str, formatter: logging.Formatter, level: int = logging.NOTSET) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(settings: "Settings") -> None:
    """
    Install JSON handlers on the root logger.

    Writes to stdout, ``app.log`` and ``error.log`` (ERROR and above) under
    ``settings.logs_path``. Safe to call more than once; existing root
    handlers are replaced.
    """
    os.makedirs(settings.logs_path, exist_ok=True)
    formatter = JsonFormatter(settings.environment)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_file(os.path.join(settings.logs_path, "app.log"), formatter))
    root_logger.addHandler(
        _rotating_file(os.path.join(settings.logs_path, "error.log"), formatter, logging.ERROR)
    )

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the request being handled, if any"""
    return correlation_id_var.get()
