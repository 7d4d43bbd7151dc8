"""Schema bootstrap for the people database.

Only creates missing tables; there is no migration support.
"""

from __future__ import annotations

import sqlite3

ADDRESSES_DDL = """
CREATE TABLE IF NOT EXISTS ADDRESSES (
    ID INTEGER PRIMARY KEY AUTOINCREMENT,
    STREET_ADDRESS TEXT NOT NULL,
    ADDRESS2 TEXT,
    CITY TEXT NOT NULL,
    STATE TEXT NOT NULL,
    POSTCODE TEXT NOT NULL,
    COUNTY TEXT,
    REGION TEXT NOT NULL CHECK(REGION IN ('NORTH','SOUTH','EAST','WEST')),
    COUNTRY TEXT NOT NULL
)
"""

PEOPLE_DDL = """
CREATE TABLE IF NOT EXISTS PEOPLE (
    ID INTEGER PRIMARY KEY AUTOINCREMENT,
    FIRST_NAME TEXT NOT NULL,
    LAST_NAME TEXT NOT NULL,
    DOB TEXT NOT NULL,
    SALARY TEXT NOT NULL DEFAULT '0',
    EMAIL TEXT,
    HOME_ADDRESS INTEGER,
    FOREIGN KEY (HOME_ADDRESS) REFERENCES ADDRESSES(ID)
)
"""


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create the ``ADDRESSES`` and ``PEOPLE`` tables if they do not exist."""
    conn.execute(ADDRESSES_DDL)
    conn.execute(PEOPLE_DDL)
