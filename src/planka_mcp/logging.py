"""Structured JSON logging for planka-mcp.

Writes JSONL to stderr (stdout carries protocol data only) and, when a log
file is configured, to that file with rotation (5MB, 3 backups).
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import Any, TextIO

LOGGER_NAME = "planka_mcp"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "tool"):
            entry["tool"] = record.tool
        if hasattr(record, "request_id"):
            entry["request_id"] = record.request_id
        if hasattr(record, "args_data"):
            entry["args"] = record.args_data
        if hasattr(record, "duration_ms"):
            entry["duration_ms"] = record.duration_ms
        if hasattr(record, "error"):
            entry["error"] = record.error
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = f"{type(record.exc_info[1]).__name__}: {record.exc_info[1]}"
        return json.dumps(entry, default=str)


def _is_our_stream_handler(handler: logging.Handler) -> bool:
    return type(handler) is logging.StreamHandler and isinstance(handler.formatter, _JsonFormatter)


def setup_logging(level: str = "INFO", log_file: str | None = None, *, stream: TextIO | None = None) -> logging.Logger:
    """Set up structured JSON logging for the ``planka_mcp`` logger tree.

    Safe to call repeatedly: the stderr handler is replaced rather than
    duplicated, and an existing file handler for the same path is reused.
    """
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    with _setup_lock:
        for h in logger.handlers[:]:
            if _is_our_stream_handler(h):
                logger.removeHandler(h)

        console = logging.StreamHandler(stream if stream is not None else sys.stderr)
        console.setFormatter(_JsonFormatter())
        logger.addHandler(console)

        if log_file is not None:
            target_filename = os.path.abspath(log_file)
            have_file = False
            for h in logger.handlers[:]:
                if not isinstance(h, RotatingFileHandler):
                    continue
                if h.baseFilename == target_filename:
                    have_file = True
                    continue
                # Different path: replace the stale handler.
                logger.removeHandler(h)
                h.close()
            if not have_file:
                handler = RotatingFileHandler(target_filename, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT)
                handler.setFormatter(_JsonFormatter())
                logger.addHandler(handler)

        logger.setLevel(numeric_level)
        logger.propagate = False
    return logger
