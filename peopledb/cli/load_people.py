"""Bulk-load people from an HR CSV export.

Every row is saved through :class:`PeopleRepoSqlite`; the whole load is
committed once at the end, so a bad row leaves the database untouched.
"""

from __future__ import annotations

import argparse
import csv
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Sequence

from peopledb.db.connection import connect, transaction
from peopledb.db.schema import ensure_schema
from peopledb.domain.entities.person import Person
from peopledb.logging_config import get_logger
from peopledb.repositories.sqlite.people_sqlite import PeopleRepoSqlite

# Column positions in the export
FIRST_NAME_COL = 2
LAST_NAME_COL = 4
EMAIL_COL = 6
DOB_COL = 10
TOB_COL = 11
SALARY_COL = 25

DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%I:%M:%S %p"


def parse_row(fields: Sequence[str], line_no: int) -> Person:
    """Build a transient :class:`Person` from one CSV record."""
    try:
        born = datetime.strptime(
            f"{fields[DOB_COL].strip()} {fields[TOB_COL].strip()}",
            f"{DATE_FORMAT} {TIME_FORMAT}",
        )
        return Person(
            first_name=fields[FIRST_NAME_COL].strip(),
            last_name=fields[LAST_NAME_COL].strip(),
            dob=born.replace(tzinfo=timezone.utc),
            salary=Decimal(fields[SALARY_COL].strip()),
            email=fields[EMAIL_COL].strip() or None,
        )
    except (IndexError, ValueError, InvalidOperation) as exc:
        raise ValueError(f"line {line_no}: cannot parse person record ({exc})") from exc


def load_people(repo: PeopleRepoSqlite, csv_path: Path, *, limit: Optional[int] = None) -> int:
    """Save the people listed in ``csv_path`` and return how many were saved."""
    logger = get_logger()
    loaded = 0
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)  # header
        for line_no, fields in enumerate(reader, start=2):
            if limit is not None and loaded >= limit:
                break
            if not fields:
                continue
            repo.save(parse_row(fields, line_no))
            loaded += 1
    logger.info("People loaded", extra={"csv": str(csv_path), "count": loaded})
    return loaded


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Load people from an HR CSV export")
    p.add_argument("csv", type=Path, help="Path to the CSV file")
    p.add_argument("--db", default=None, help="SQLite DB path (defaults to PEOPLEDB_DB_PATH)")
    p.add_argument("--limit", type=int, default=None, help="Load at most N rows")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    conn = connect(args.db)
    try:
        ensure_schema(conn)
        with transaction(conn):
            loaded = load_people(PeopleRepoSqlite(conn), args.csv, limit=args.limit)
    finally:
        conn.close()

    print(f"Loaded {loaded} people from {args.csv}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
