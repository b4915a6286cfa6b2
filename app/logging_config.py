"""
Ignyt Logging Configuration

Structured logs with keyword context. Every line emitted while a request is
being handled carries that request's id, and context values under secret
keys (tokens, passwords) are masked before they are written.
"""
import json
import logging
import os
import sys
import time
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Optional

LOG_LEVEL = os.environ.get("IGNYT_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("IGNYT_LOG_FORMAT", "json")  # json or text

# Context keys whose values never reach the log output
REDACTED_KEYS = frozenset({
    "password",
    "hashed_password",
    "access_token",
    "refresh_token",
    "token",
    "invite_token",
    "secret_key",
    "api_key",
})
REDACTED = "[redacted]"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def redact(context: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (REDACTED if k in REDACTED_KEYS and v is not None else v) for k, v in context.items()}


# ============================================================
# STRUCTURED LOGGER
# ============================================================

class StructuredLogger:
    """Thin wrapper over a stdlib logger taking context as keyword arguments."""

    def __init__(self, name: str, fmt: str = LOG_FORMAT, level: str = LOG_LEVEL):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level, logging.INFO))
        self.logger.propagate = False

        self.logger.handlers = []
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter() if fmt == "json" else TextFormatter())
        self.logger.addHandler(handler)

    def _log(self, level: str, message: str, **context):
        extra = {
            "context": redact(context),
            "logger_name": self.name,
            "request_id": request_id_var.get(),
        }
        getattr(self.logger, level)(message, extra=extra)

    def debug(self, message: str, **context):
        self._log("debug", message, **context)

    def info(self, message: str, **context):
        self._log("info", message, **context)

    def warning(self, message: str, **context):
        self._log("warning", message, **context)

    def error(self, message: str, error: Optional[Exception] = None, **context):
        if error:
            context["error_type"] = type(error).__name__
            context["error_message"] = str(error)
            context["traceback"] = traceback.format_exc()
        self._log("error", message, **context)


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": getattr(record, "logger_name", record.name),
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            data["request_id"] = request_id
        data.update(getattr(record, "context", {}))
        return json.dumps(data, default=str)


class TextFormatter(logging.Formatter):
    """Coloured single-line output for local development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        stamp = datetime.now(timezone.utc).strftime("%H:%M:%S")
        line = f"{color}[{stamp}] [{record.levelname}]{self.RESET} {record.getMessage()}"

        fields = dict(getattr(record, "context", {}))
        fields.pop("traceback", None)
        request_id = getattr(record, "request_id", None)
        if request_id:
            fields = {"request_id": request_id, **fields}
        if fields:
            line += " \033[90m(" + " ".join(f"{k}={v}" for k, v in fields.items()) + f"){self.RESET}"
        return line


# ============================================================
# OUTBOUND CALL TIMING
# ============================================================

def timed(logger: StructuredLogger):
    """Log how long a call took; failures are logged at warning and re-raised."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.warning(
                    f"{func.__name__} failed",
                    function=func.__name__,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise
            logger.debug(
                f"{func.__name__} completed",
                function=func.__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        return wrapper

    return decorator


# ============================================================
# LOGGER INSTANCES
# ============================================================

_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """The ``ignyt.<name>`` logger, created once per process."""
    full_name = f"ignyt.{name}"
    if full_name not in _loggers:
        _loggers[full_name] = StructuredLogger(full_name)
    return _loggers[full_name]


api_logger = get_logger("api")
auth_logger = get_logger("auth")
db_logger = get_logger("db")
social_logger = get_logger("social")
