from __future__ import annotations

import sqlite3
from typing import Any, Optional, Sequence

from peopledb.domain.entities.address import Address
from peopledb.domain.value_objects.enums import Region

from ..crud import CrudRepository
from ..sql import CrudOperation, sql

SAVE_ADDRESS_SQL = """
    INSERT INTO ADDRESSES
    (STREET_ADDRESS, ADDRESS2, CITY, STATE, POSTCODE, COUNTY, REGION, COUNTRY)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""
UPDATE_SQL = """
    UPDATE ADDRESSES
    SET STREET_ADDRESS = ?, ADDRESS2 = ?, CITY = ?, STATE = ?, POSTCODE = ?,
        COUNTY = ?, REGION = ?, COUNTRY = ?
    WHERE ID = ?
"""
SELECT_ADDRESS = """
    SELECT ID, STREET_ADDRESS, ADDRESS2, CITY, STATE, POSTCODE, COUNTY, REGION, COUNTRY
    FROM ADDRESSES
"""
FIND_BY_ID_SQL = SELECT_ADDRESS + " WHERE ID = ?"
FIND_ALL_SQL = SELECT_ADDRESS + " ORDER BY ID"
SELECT_COUNT_SQL = "SELECT COUNT(*) FROM ADDRESSES"
DELETE_SQL = "DELETE FROM ADDRESSES WHERE ID = ?"
DELETE_IN_SQL = "DELETE FROM ADDRESSES WHERE ID IN (:ids)"


def address_from_row(row: sqlite3.Row, id_column: str = "ID") -> Optional[Address]:
    """Build an :class:`Address` from ``row``, or ``None`` when ``id_column`` is null.

    ``id_column`` lets joined queries alias the address key.
    """
    address_id = row[id_column]
    if address_id is None:
        return None
    return Address(
        id=int(address_id),
        street_address=row["STREET_ADDRESS"],
        address2=row["ADDRESS2"],
        city=row["CITY"],
        state=row["STATE"],
        postcode=row["POSTCODE"],
        county=row["COUNTY"],
        region=Region.parse(row["REGION"]),
        country=row["COUNTRY"],
    )


class AddressesRepoSqlite(CrudRepository[Address]):
    """SQLite repository for :class:`Address` records.

    Example:
        >>> conn = sqlite3.connect(":memory:")
        >>> ensure_schema(conn)  # doctest: +SKIP
        >>> repo = AddressesRepoSqlite(conn)
        >>> repo.save(Address(None, "1 Main St", None, "Reno", "NV", "89501",
        ...                   None, Region.WEST, "United States")).id  # doctest: +SKIP
        1
    """

    @sql(SAVE_ADDRESS_SQL, CrudOperation.SAVE)
    def map_for_save(self, entity: Address) -> Sequence[Any]:
        return self._columns(entity)

    @sql(UPDATE_SQL, CrudOperation.UPDATE)
    def map_for_update(self, entity: Address) -> Sequence[Any]:
        return self._columns(entity)

    @sql(FIND_BY_ID_SQL, CrudOperation.FIND_BY_ID)
    @sql(FIND_ALL_SQL, CrudOperation.FIND_ALL)
    @sql(SELECT_COUNT_SQL, CrudOperation.COUNT)
    @sql(DELETE_SQL, CrudOperation.DELETE_ONE)
    @sql(DELETE_IN_SQL, CrudOperation.DELETE_MANY)
    def extract_entity(self, row: sqlite3.Row) -> Address:
        address = address_from_row(row)
        if address is None:
            raise ValueError("address row without ID")
        return address

    @staticmethod
    def _columns(entity: Address) -> tuple[Any, ...]:
        return (
            entity.street_address,
            entity.address2,
            entity.city,
            entity.state,
            entity.postcode,
            entity.county,
            Region(entity.region).value,
            entity.country,
        )
