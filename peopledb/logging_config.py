"""Logging configuration for peopledb.

Provides a JSON formatted logger named ``peopledb``. Library modules log
through ``logging.getLogger(__name__)`` and therefore end up as children of
this logger once :func:`get_logger` has attached the handlers.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from peopledb.config.settings import settings

LOG_NAME = "peopledb"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5

# Keys a bare LogRecord carries; whatever else a record holds came in via ``extra``.
_RECORD_KEYS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line.

    ``extra`` fields such as ``operation``, ``affected`` or ``sql`` are
    grouped under ``"extra"``; a traceback, if any, under ``"exc_info"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="seconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_KEYS}
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _is_configured(logger: logging.Logger) -> bool:
    return any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers)


def get_logger(log_file: Path | None = None) -> logging.Logger:
    """Return the project logger, attaching its handlers on first use.

    The console handler follows ``settings.log_level``; the rotating file at
    ``log_file`` (default ``settings.log_file``) keeps INFO and above. Handlers
    added by anyone else do not count as configuration.
    """
    logger = logging.getLogger(LOG_NAME)
    if _is_configured(logger):
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = JsonFormatter()

    console = logging.StreamHandler()
    console.setLevel(settings.log_level)
    console.setFormatter(formatter)

    path = Path(log_file) if log_file is not None else Path(settings.log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    rotating = RotatingFileHandler(
        path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    rotating.setLevel(logging.INFO)
    rotating.setFormatter(formatter)

    logger.addHandler(console)
    logger.addHandler(rotating)
    logger.propagate = False
    return logger
