"""Logging for the Head Cook AI backend and client.

Two output formats, picked by LOG_TYPE (text, json; default text), at the
level named by LOG_LEVEL (default INFO). Request-scoped values passed via
`extra=` (request_id, uid) are carried into both formats.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any


CONTEXT_FIELDS = ("request_id", "uid")

# Third-party loggers that are chatty below WARNING
SDK_LOGGERS = ("google.genai", "google.auth", "httpx", "httpcore", "urllib3")

RESET = "\033[0m"


def log_context(record: logging.LogRecord) -> dict[str, Any]:
    """Request-scoped fields present on the record, in CONTEXT_FIELDS order."""
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, UTC timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **log_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class RichTextFormatter(logging.Formatter):
    """Colored single-line output for terminals.

    Layout: <icon> <time> <LEVEL> <logger> <message> [key=value ...]
    """

    STYLES = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "🍳"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "❌"),
        "CRITICAL": ("\033[35m", "🔥"),
    }

    def format(self, record: logging.LogRecord) -> str:
        color, icon = self.STYLES.get(record.levelname, (RESET, ""))
        line = " ".join(
            [
                icon,
                self.formatTime(record, "%H:%M:%S"),
                f"{record.levelname:<8}",
                f"{record.name:<16}",
                record.getMessage(),
            ]
        )
        context = log_context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"

        text = f"{color}{line}{RESET}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def _env_level() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _env_formatter() -> logging.Formatter:
    if os.getenv("LOG_TYPE", "text").lower() == "json":
        return JSONFormatter()
    return RichTextFormatter()


def get_logger(name: str) -> logging.Logger:
    """Return the named logger with a stdout handler attached.

    Level and format come from the environment at first call; a logger that
    already has handlers is returned as is.
    """
    configured = logging.getLogger(name)
    if configured.handlers:
        return configured

    level = _env_level()
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_env_formatter())

    configured.setLevel(level)
    configured.addHandler(handler)
    return configured


def quiet_sdk_loggers(level: int = logging.WARNING) -> None:
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(level)


logger = get_logger("headcook")
quiet_sdk_loggers()
