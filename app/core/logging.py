"""
app/core/logging.py

Purpose: Logging configuration

- JSON lines in production, colored single lines in development
- Per-task context (request_id, admin_id, ...) attached to every record
- Requester phone numbers masked in production output
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from app.core.config import settings


# Record attributes promoted into the log output when present
CONTEXT_FIELDS = ("request_id", "admin_id", "channel", "provider", "status")

# Shown next to the message in development output
DEV_CONTEXT_FIELDS = ("request_id", "admin_id", "channel")

PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+?91[\s-]?)?[6-9]\d{4}[\s-]?\d{5}(?!\d)", re.ASCII)

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("log_context", default={})


def mask_phone_numbers(text: str) -> str:
    """Keeps the last four digits of anything that looks like an Indian mobile number."""
    def _mask(match: re.Match) -> str:
        digits = re.sub(r"[^0-9]", "", match.group(0))
        return f"******{digits[-4:]}"

    return PHONE_PATTERN.sub(_mask, text)


class ContextFilter(logging.Filter):
    """
    Copies the current task's LogContext onto each record. Values passed
    explicitly through `extra=` win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line for the log pipeline.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_phone_numbers(record.getMessage()),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        log_data.update({
            field: getattr(record, field)
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        })

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for local runs.
    """

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
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        line = f"{color}[{timestamp}] {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        context = " ".join(
            f"{field}={getattr(record, field)}"
            for field in DEV_CONTEXT_FIELDS
            if hasattr(record, field)
        )
        if context:
            line = f"{line} [{context}]"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"

        return line


def setup_logging():
    """
    Installs a single stdout handler on the root logger.
    JSON in production, colored text elsewhere.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if settings.is_production else DevelopmentFormatter())
    handler.addFilter(ContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Provider HTTP calls and driver chatter
    for noisy in ("httpx", "httpcore", "motor", "pymongo", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = get_logger("logging")
    logger.info(f"Logging configured (environment={settings.ENVIRONMENT}, level={settings.LOG_LEVEL})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Logger under the `admin_console` namespace.

    Args:
        name: Usually __name__
    """
    return logging.getLogger(f"admin_console.{name}")


class LogContext:
    """
    Adds fields to every record logged inside the block, in this task only.

    Usage:
        with LogContext(request_id="1712", admin_id="A1"):
            logger.info("Approving admin code request")
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
