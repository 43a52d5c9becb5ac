"""Logging configuration utilities.

One call, :func:`configure_logging`, sets up the root logger for the CLI and
for embedding applications. Settings resolve from arguments first, then from
``LOG_LEVEL`` / ``LOG_OUTPUT`` / ``LOG_FILE_PATH`` / ``LOG_FORMAT``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Literal

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_OUTPUT = os.environ.get("LOG_OUTPUT", "stdout").lower()
LOG_FILE_PATH = os.environ.get("LOG_FILE_PATH", "logs/feedsentry.log")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "text").lower()

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

# Chatty libraries that would otherwise log every HTTP connection at DEBUG
NOISY_LOGGERS = ("urllib3", "charset_normalizer", "asyncio")

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; the message is escaped properly."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "file": f"{record.filename}:{record.lineno}",
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure application logging.

    Parameters
    ----------
    level:
        Logging level as a string (e.g., "INFO") or numeric value.
    output:
        Logging output destination: "stdout", "file", or "both".
    file_path:
        Path to the log file if output is "file" or "both".
    log_format:
        Logging format: "text" or "json".
    quiet:
        Logger names capped at WARNING regardless of ``level``.
    """
    # Resolve at call-time so a .env loaded by main() is respected
    if level is None:
        level = os.environ.get("LOG_LEVEL", LOG_LEVEL)
    if isinstance(level, str):
        level = level.upper()
    if log_format is None:
        log_format = (os.environ.get("LOG_FORMAT") or LOG_FORMAT).lower()
    if output is None:
        output = (os.environ.get("LOG_OUTPUT") or LOG_OUTPUT).lower()
    if file_path is None:
        file_path = os.environ.get("LOG_FILE_PATH") or LOG_FILE_PATH

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT)

    if output in ("stdout", "both"):
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(formatter)
        root_logger.addHandler(stdout_handler)

    if output in ("file", "both"):
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(file_path, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
