"""Generic CRUD engine shared by every concrete repository.

:class:`CrudRepository` runs the lifecycle of one entity type against a
``sqlite3.Connection`` owned by the caller. The SQL for each operation is
looked up in the class registration table built from ``@sql`` tags (see
:mod:`peopledb.repositories.sql`); when an operation has no tag the matching
``get_<operation>_sql`` method is called instead.

The engine never commits or rolls back. Transaction scope belongs to whoever
opened the connection.

Example:
    >>> conn = sqlite3.connect(":memory:")
    >>> ensure_schema(conn)  # doctest: +SKIP
    >>> repo = PeopleRepoSqlite(conn)  # doctest: +SKIP
    >>> repo.save(Person("John", "Smith", dob)).id  # doctest: +SKIP
    1
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import closing
from typing import Any, Generic, Optional, Sequence, TypeVar

from peopledb.config.settings import settings
from peopledb.domain.entity import Entity

from .errors import (
    ExecutionError,
    MisconfigurationError,
    SaveError,
)
from .identity import assign_identity, identity_of
from .sql import IDS_MARKER, CrudOperation, register_sql_table, resolve_sql

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)

# SQLite INTEGER is a signed 64-bit value
SQLITE_MIN_ID = -(2**63)
SQLITE_MAX_ID = 2**63 - 1


class CrudRepository(ABC, Generic[T]):
    """Base repository implementing save/find/count/delete/update for ``T``."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        register_sql_table(cls)

    # ---------- CRUD ----------
    def save(self, entity: T) -> T:
        """Insert ``entity`` and assign the generated key to it in place.

        Any failure while binding or inserting raises :class:`SaveError`,
        except :class:`MisconfigurationError` which passes through unchanged.
        Dependents saved on the way are reset with :meth:`discard_dependents`.
        """
        statement = resolve_sql(self, CrudOperation.SAVE, self.get_save_sql)
        try:
            params = tuple(self.map_for_save(entity))
            with closing(self._run(statement, params)) as cur:
                rowid = cur.lastrowid
        except MisconfigurationError:
            self.discard_dependents(entity)
            raise
        except Exception as exc:
            self.discard_dependents(entity)
            logger.error(
                "Save failed",
                extra={"repository": type(self).__name__, "error": str(exc)},
            )
            raise SaveError(entity) from exc
        if not rowid:
            self.discard_dependents(entity)
            raise SaveError(entity, f"SQLite insert returned no generated key: {entity!r}")
        assign_identity(entity, rowid)
        logger.debug("Saved entity", extra={"repository": type(self).__name__, "id": rowid})
        return entity

    def find_by_id(self, entity_id: int) -> Optional[T]:
        """Return the entity stored under ``entity_id`` or ``None``."""
        if isinstance(entity_id, int) and not SQLITE_MIN_ID <= entity_id <= SQLITE_MAX_ID:
            return None
        statement = resolve_sql(self, CrudOperation.FIND_BY_ID, self.get_find_by_id_sql)
        rows = self._fetch(CrudOperation.FIND_BY_ID, statement, (entity_id,))
        if rows:
            return self.extract_entity(rows[0])
        return None

    def find_all(self) -> list[T]:
        """Return every stored entity in the order the store yields them."""
        statement = resolve_sql(self, CrudOperation.FIND_ALL, self.get_find_all_sql)
        rows = self._fetch(CrudOperation.FIND_ALL, statement)
        return [self.extract_entity(row) for row in rows]

    def count(self) -> int:
        """Return the number of stored entities."""
        statement = resolve_sql(self, CrudOperation.COUNT, self.get_count_sql)
        rows = self._fetch(CrudOperation.COUNT, statement)
        if not rows or rows[0][0] is None:
            return 0
        return int(rows[0][0])

    def delete(self, *entities: T) -> None:
        """Delete one entity by identity, or several with a single statement.

        Deleting rows that are already gone is not an error. Every entity must
        have been saved; the in-memory objects keep their identity afterwards.
        """
        if not entities:
            return
        if len(entities) == 1:
            statement = resolve_sql(self, CrudOperation.DELETE_ONE, self.get_delete_one_sql)
            self._write(CrudOperation.DELETE_ONE, statement, (identity_of(entities[0]),))
            return

        statement = resolve_sql(self, CrudOperation.DELETE_MANY, self.get_delete_many_sql)
        if IDS_MARKER not in statement:
            raise MisconfigurationError(
                f"{type(self).__name__} DELETE_MANY SQL must contain the {IDS_MARKER} marker"
            )
        ids = ",".join(str(identity_of(entity)) for entity in entities)
        # sqlite3 cannot bind a variable-length IN list, so the ids go in as text
        self._write(CrudOperation.DELETE_MANY, statement.replace(IDS_MARKER, ids))

    def update(self, entity: T) -> None:
        """Write the non-identity fields of ``entity`` to its stored row."""
        entity_id = identity_of(entity)
        statement = resolve_sql(self, CrudOperation.UPDATE, self.get_update_sql)
        try:
            params = (*self.map_for_update(entity), entity_id)
            self._write(CrudOperation.UPDATE, statement, params)
        except Exception:
            self.discard_dependents(entity)
            raise

    # ---------- Fallback SQL ----------
    def get_save_sql(self) -> str:
        return self._missing_sql(CrudOperation.SAVE)

    def get_update_sql(self) -> str:
        return self._missing_sql(CrudOperation.UPDATE)

    def get_find_by_id_sql(self) -> str:
        return self._missing_sql(CrudOperation.FIND_BY_ID)

    def get_find_all_sql(self) -> str:
        return self._missing_sql(CrudOperation.FIND_ALL)

    def get_count_sql(self) -> str:
        return self._missing_sql(CrudOperation.COUNT)

    def get_delete_one_sql(self) -> str:
        return self._missing_sql(CrudOperation.DELETE_ONE)

    def get_delete_many_sql(self) -> str:
        """Return SQL like ``DELETE FROM T WHERE ID IN (:ids)``."""
        return self._missing_sql(CrudOperation.DELETE_MANY)

    # ---------- Mapping callbacks ----------
    @abstractmethod
    def extract_entity(self, row: sqlite3.Row) -> T:
        """Build one entity from a result row."""

    @abstractmethod
    def map_for_save(self, entity: T) -> Sequence[Any]:
        """Return the insert parameters in placeholder order."""

    @abstractmethod
    def map_for_update(self, entity: T) -> Sequence[Any]:
        """Return the update parameters, without the trailing identity."""

    def discard_dependents(self, entity: T) -> None:
        """Forget identities given to dependents of ``entity`` by a failed write.

        The caller is expected to roll back, which removes those rows, so the
        in-memory dependents must become transient again.
        """

    # ---------- Helpers ----------
    def _missing_sql(self, operation: CrudOperation) -> str:
        raise MisconfigurationError(
            f"{type(self).__name__} has no SQL for {operation.value}: tag a member with "
            f"@sql(..., CrudOperation.{operation.name}) or override the fallback method"
        )

    def _run(self, statement: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        cur = self._conn.cursor()
        cur.row_factory = sqlite3.Row
        if settings.log_sql:
            logger.debug("Executing SQL", extra={"sql": statement, "params": params})
        try:
            cur.execute(statement, params)
        except sqlite3.Error:
            cur.close()
            raise
        return cur

    def _fetch(
        self, operation: CrudOperation, statement: str, params: Sequence[Any] = ()
    ) -> list[sqlite3.Row]:
        try:
            with closing(self._run(statement, params)) as cur:
                return cur.fetchall()
        except sqlite3.Error as exc:
            logger.error(
                "Query failed",
                extra={"repository": type(self).__name__, "operation": operation.value},
            )
            raise ExecutionError(f"{operation.value} failed on {type(self).__name__}: {exc}") from exc

    def _write(self, operation: CrudOperation, statement: str, params: Sequence[Any] = ()) -> int:
        try:
            with closing(self._run(statement, params)) as cur:
                affected = cur.rowcount
        except sqlite3.Error as exc:
            logger.error(
                "Statement failed",
                extra={"repository": type(self).__name__, "operation": operation.value},
            )
            raise ExecutionError(f"{operation.value} failed on {type(self).__name__}: {exc}") from exc
        logger.debug(
            "Records affected",
            extra={"operation": operation.value, "affected": affected},
        )
        return affected
