"""
Venue_POS.logging_setup

Configures the package logger once per process.

- Always: a stderr stream handler with a plain text format.
- Optionally (log_file=True): a RotatingFileHandler at logs/venue_pos.log,
  one compact JSON object per line so sync diagnostics are easy to grep.
"""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "Venue_POS"

_INITIALIZED = False

_STD_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "taskName", "message",
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        meta = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _STD_ATTRS and not k.startswith("_")
        }
        if meta:
            base["extra"] = meta
        return json.dumps(base, ensure_ascii=False, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: bool = False,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    global _INITIALIZED
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _INITIALIZED:
        return logger

    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(stream)

    if log_file:
        directory = Path(log_dir) if log_dir else Path("logs")
        directory.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            directory / "venue_pos.log",
            maxBytes=2_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    _INITIALIZED = True
    return logger
