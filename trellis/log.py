"""Structured JSON logging for Trellis.

Writes JSONL to .trellis/trellis.log with rotation (1MB, 3 backups).
"""

from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

_LOG_FILENAME = "trellis.log"
_MAX_BYTES = 1024 * 1024
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
        if hasattr(record, "release_id"):
            entry["release_id"] = record.release_id
        if hasattr(record, "item_ids"):
            entry["item_ids"] = record.item_ids
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def setup_logging(trellis_dir: Path, level: str = "INFO") -> logging.Logger:
    """Set up structured JSON logging to .trellis/trellis.log.

    Safe to call repeatedly; a handler for the same file is only added once
    and a handler pointing at a different directory is replaced.
    """
    logger = logging.getLogger("trellis")
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    log_path = trellis_dir / _LOG_FILENAME
    target_filename = os.path.abspath(str(log_path))

    for h in logger.handlers[:]:
        if not isinstance(h, RotatingFileHandler):
            continue
        if h.baseFilename == target_filename:
            logger.setLevel(level)
            return logger
        logger.removeHandler(h)
        h.close()

    trellis_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
    )
    handler.setFormatter(_JsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
