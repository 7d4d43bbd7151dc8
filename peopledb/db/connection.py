"""Connection helpers for callers of the repositories.

Repositories never open, commit or close connections themselves; scripts and
tests use these helpers to do it around them.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from peopledb.config.settings import settings

logger = logging.getLogger(__name__)


def connect(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a SQLite connection with foreign keys enabled.

    ``db_path`` defaults to ``settings.db_path``. The parent directory is
    created for file databases.
    """
    path = db_path or settings.db_path
    if path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys = ON;")
    logger.debug("Opened connection", extra={"db_path": path})
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Commit when the block succeeds, roll back when it raises."""
    try:
        yield conn
    except BaseException:
        conn.rollback()
        logger.warning("Transaction rolled back")
        raise
    conn.commit()
