"""Application settings for peopledb.

Environment variables are loaded from a ``.env`` file using ``python-dotenv``
and exposed through a frozen Pydantic settings object.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load environment variables from a .env file if present
load_dotenv()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_DB_PATH = os.path.join("data", "peopledb.sqlite3")
DEFAULT_LOG_FILE = os.path.join("logs", "app.log")
DEFAULT_LOG_LEVEL = "INFO"
_TRUE_SET = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Immutable settings object used across the application."""

    db_path: str = DEFAULT_DB_PATH
    log_file: str = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL
    log_sql: bool = False

    model_config = ConfigDict(frozen=True)


def _env_flag(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in _TRUE_SET


def _build_settings() -> Settings:
    """Construct the ``Settings`` instance based on environment variables."""

    log_level = os.getenv("PEOPLEDB_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"PEOPLEDB_LOG_LEVEL must be a logging level name, got {log_level!r}")

    return Settings(
        db_path=os.getenv("PEOPLEDB_DB_PATH") or DEFAULT_DB_PATH,
        log_file=os.getenv("PEOPLEDB_LOG_FILE") or DEFAULT_LOG_FILE,
        log_level=log_level,
        log_sql=_env_flag(os.getenv("PEOPLEDB_LOG_SQL")),
    )


# Public settings instance
settings = _build_settings()
