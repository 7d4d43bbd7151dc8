from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

import peopledb.cli.load_people as load_cli
from peopledb.db.schema import ensure_schema
from peopledb.repositories.sqlite.people_sqlite import PeopleRepoSqlite

HEADER = ",".join(f"c{i}" for i in range(26))


def _record(first: str, last: str, email: str, dob: str, tob: str, salary: str) -> str:
    fields = [""] * 26
    fields[2] = first
    fields[4] = last
    fields[6] = email
    fields[10] = dob
    fields[11] = tob
    fields[25] = salary
    return ",".join(fields)


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "hr.csv"
    path.write_text(
        "\n".join(
            [
                HEADER,
                _record("Ann", "Lee", "ann@example.com", "3/7/1984", "09:05:00 PM", "51000.5"),
                _record("Bo", "Ng", "", "12/31/1990", "12:00:01 AM", "62000"),
                _record("Cy", "Ortiz", "cy@example.com", "1/1/2000", "07:30:00 AM", "70000"),
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return path


def test_parse_row_builds_utc_person() -> None:
    fields = _record("Ann", "Lee", "ann@example.com", "3/7/1984", "09:05:00 PM", "51000.5").split(",")
    person = load_cli.parse_row(fields, 2)
    assert person.id is None
    assert person.first_name == "Ann" and person.last_name == "Lee"
    assert person.dob == datetime(1984, 3, 7, 21, 5, tzinfo=timezone.utc)
    assert person.salary == Decimal("51000.5")
    assert person.email == "ann@example.com"


def test_parse_row_reports_line_number() -> None:
    fields = _record("Ann", "Lee", "", "31/31/1984", "09:05:00 PM", "1").split(",")
    with pytest.raises(ValueError, match="line 7"):
        load_cli.parse_row(fields, 7)
    with pytest.raises(ValueError, match="line 8"):
        load_cli.parse_row(["too", "short"], 8)


def test_load_people_respects_limit(csv_file: Path) -> None:
    conn = sqlite3.connect(":memory:")
    ensure_schema(conn)
    repo = PeopleRepoSqlite(conn)
    assert load_cli.load_people(repo, csv_file, limit=2) == 2
    assert repo.count() == 2
    people = repo.find_all()
    assert [p.first_name for p in people] == ["Ann", "Bo"]
    assert people[1].email is None
    conn.close()


def test_main_loads_and_commits(
    tmp_path: Path, csv_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db = tmp_path / "data" / "people.sqlite3"
    rc = load_cli.main([str(csv_file), "--db", str(db)])
    assert rc == 0
    assert "Loaded 3 people" in capsys.readouterr().out

    conn = sqlite3.connect(db)
    assert conn.execute("SELECT COUNT(*) FROM PEOPLE").fetchone()[0] == 3
    conn.close()


def test_main_rolls_back_on_bad_row(tmp_path: Path, csv_file: Path) -> None:
    with open(csv_file, "a", encoding="utf-8") as f:
        f.write(_record("Bad", "Row", "", "not-a-date", "09:00:00 AM", "1") + "\n")
    db = tmp_path / "people.sqlite3"
    with pytest.raises(ValueError, match="line 5"):
        load_cli.main([str(csv_file), "--db", str(db)])

    conn = sqlite3.connect(db)
    assert conn.execute("SELECT COUNT(*) FROM PEOPLE").fetchone()[0] == 0
    conn.close()
