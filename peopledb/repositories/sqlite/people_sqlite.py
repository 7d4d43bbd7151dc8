from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Sequence

from peopledb.domain.entities.address import Address
from peopledb.domain.entities.person import Person

from ..crud import CrudRepository
from ..sql import CrudOperation, sql
from .addresses_sqlite import AddressesRepoSqlite, address_from_row

SAVE_PERSON_SQL = """
    INSERT INTO PEOPLE
    (FIRST_NAME, LAST_NAME, DOB, SALARY, EMAIL, HOME_ADDRESS)
    VALUES (?, ?, ?, ?, ?, ?)
"""
UPDATE_SQL = """
    UPDATE PEOPLE
    SET FIRST_NAME = ?, LAST_NAME = ?, DOB = ?, SALARY = ?, EMAIL = ?, HOME_ADDRESS = ?
    WHERE ID = ?
"""
SELECT_PERSON = """
    SELECT
    P.ID, P.FIRST_NAME, P.LAST_NAME, P.DOB, P.SALARY, P.EMAIL,
    A.ID AS ADDRESS_ID, A.STREET_ADDRESS, A.ADDRESS2, A.CITY, A.STATE,
    A.POSTCODE, A.COUNTY, A.REGION, A.COUNTRY
    FROM PEOPLE AS P
    LEFT OUTER JOIN ADDRESSES AS A ON P.HOME_ADDRESS = A.ID
"""
FIND_BY_ID_SQL = SELECT_PERSON + " WHERE P.ID = ?"
FIND_ALL_SQL = SELECT_PERSON + " ORDER BY P.ID"
SELECT_COUNT_SQL = "SELECT COUNT(*) FROM PEOPLE"
DELETE_SQL = "DELETE FROM PEOPLE WHERE ID = ?"
DELETE_IN_SQL = "DELETE FROM PEOPLE WHERE ID IN (:ids)"


def _dob_to_db(dob: datetime) -> str:
    return dob.astimezone(timezone.utc).isoformat()


def _dob_from_db(value: str) -> datetime:
    dob = datetime.fromisoformat(value)
    if dob.tzinfo is None:
        return dob.replace(tzinfo=timezone.utc)
    return dob.astimezone(timezone.utc)


class PeopleRepoSqlite(CrudRepository[Person]):
    """SQLite repository for :class:`Person` records.

    The home address is persisted through a composed
    :class:`AddressesRepoSqlite` sharing the same connection. A transient
    address is saved before the person so its fresh key can be bound as the
    ``HOME_ADDRESS`` foreign key. If the person write then fails, that
    address is made transient again.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        super().__init__(conn)
        self._addresses = AddressesRepoSqlite(conn)
        self._saved_addresses: list[Address] = []

    @sql(SAVE_PERSON_SQL, CrudOperation.SAVE)
    def map_for_save(self, entity: Person) -> Sequence[Any]:
        home_address_id = self._home_address_id(entity)
        return (
            entity.first_name,
            entity.last_name,
            _dob_to_db(entity.dob),
            str(entity.salary),
            entity.email,
            home_address_id,
        )

    @sql(UPDATE_SQL, CrudOperation.UPDATE)
    def map_for_update(self, entity: Person) -> Sequence[Any]:
        home_address_id = self._home_address_id(entity)
        return (
            entity.first_name,
            entity.last_name,
            _dob_to_db(entity.dob),
            str(entity.salary),
            entity.email,
            home_address_id,
        )

    @sql(FIND_BY_ID_SQL, CrudOperation.FIND_BY_ID)
    @sql(FIND_ALL_SQL, CrudOperation.FIND_ALL)
    @sql(SELECT_COUNT_SQL, CrudOperation.COUNT)
    @sql(DELETE_SQL, CrudOperation.DELETE_ONE)
    @sql(DELETE_IN_SQL, CrudOperation.DELETE_MANY)
    def extract_entity(self, row: sqlite3.Row) -> Person:
        salary = row["SALARY"]
        return Person(
            id=int(row["ID"]),
            first_name=row["FIRST_NAME"],
            last_name=row["LAST_NAME"],
            dob=_dob_from_db(row["DOB"]),
            salary=Decimal(str(salary)) if salary is not None else Decimal("0"),
            email=row["EMAIL"],
            home_address=address_from_row(row, "ADDRESS_ID"),
        )

    def discard_dependents(self, entity: Person) -> None:
        for address in self._saved_addresses:
            address.id = None
        self._saved_addresses.clear()

    def _home_address_id(self, entity: Person) -> Optional[int]:
        self._saved_addresses.clear()
        address = entity.home_address
        if address is None:
            return None
        if address.id is None:
            self._addresses.save(address)
            self._saved_addresses.append(address)
        return address.id
