"""SQL metadata for repositories.

Concrete repositories attach SQL templates to their members with the
:func:`sql` decorator::

    class PeopleRepoSqlite(CrudRepository[Person]):
        @sql("SELECT ... WHERE ID = ?", CrudOperation.FIND_BY_ID)
        @sql("SELECT COUNT(*) FROM PEOPLE", CrudOperation.COUNT)
        def extract_entity(self, row): ...

The tags are collected once per class into a registration table mapping each
:class:`CrudOperation` to exactly one :class:`SqlTag`. :func:`resolve_sql`
reads that table and only calls the fallback producer on a miss.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, TypeVar

from .errors import DuplicateSqlError

logger = logging.getLogger(__name__)

SQL_TAGS_ATTR = "__sql_tags__"
SQL_TABLE_ATTR = "__sql_table__"
IDS_MARKER = ":ids"

F = TypeVar("F", bound=Callable[..., Any])


class CrudOperation(str, Enum):
    SAVE = "SAVE"
    UPDATE = "UPDATE"
    FIND_BY_ID = "FIND_BY_ID"
    FIND_ALL = "FIND_ALL"
    COUNT = "COUNT"
    DELETE_ONE = "DELETE_ONE"
    DELETE_MANY = "DELETE_MANY"


@dataclass(frozen=True)
class SqlTag:
    template: str
    operation: CrudOperation
    member: Optional[str] = None


def sql(template: str, operation: CrudOperation) -> Callable[[F], F]:
    """Tag a repository member with the SQL used for ``operation``.

    Stacked decorators form a tag group on the member; the tags keep the order
    in which they are written.
    """

    def decorator(func: F) -> F:
        target = getattr(func, "__func__", func)
        existing = getattr(target, SQL_TAGS_ATTR, ())
        setattr(target, SQL_TAGS_ATTR, (SqlTag(template, CrudOperation(operation)),) + existing)
        return func

    return decorator


def collect_sql_tags(namespace: Mapping[str, Any], owner: str = "") -> dict[CrudOperation, SqlTag]:
    """Flatten the tags declared in one class body into a table.

    Raises :class:`DuplicateSqlError` when two tags in ``namespace`` name the
    same operation.
    """
    table: dict[CrudOperation, SqlTag] = {}
    for name, member in namespace.items():
        target = getattr(member, "__func__", member)
        for tag in getattr(target, SQL_TAGS_ATTR, ()):
            if tag.operation in table:
                first = table[tag.operation]
                raise DuplicateSqlError(
                    f"{owner or 'repository'} declares more than one SQL template for "
                    f"{tag.operation.value} (on {first.member!r} and {name!r})"
                )
            table[tag.operation] = replace(tag, member=name)
    return table


def register_sql_table(cls: type) -> Mapping[CrudOperation, SqlTag]:
    """Build and store the registration table of ``cls``.

    Entries inherited from base classes come first; tags declared in the body
    of ``cls`` override them.
    """
    table: dict[CrudOperation, SqlTag] = {}
    for base in reversed(cls.__mro__[1:]):
        if base is object:
            continue
        inherited = base.__dict__.get(SQL_TABLE_ATTR)
        if inherited is None:
            inherited = collect_sql_tags(base.__dict__, base.__qualname__)
        table.update(inherited)
    table.update(collect_sql_tags(cls.__dict__, cls.__qualname__))
    frozen = MappingProxyType(table)
    setattr(cls, SQL_TABLE_ATTR, frozen)
    return frozen


def sql_table(cls: type) -> Mapping[CrudOperation, SqlTag]:
    """Return the registration table of ``cls``, building it on first use."""
    table = cls.__dict__.get(SQL_TABLE_ATTR)
    if table is None:
        table = register_sql_table(cls)
    return table


def resolve_sql(repository: object, operation: CrudOperation, fallback: Callable[[], str]) -> str:
    """Return the SQL template tagged for ``operation`` on ``repository``.

    ``fallback`` is invoked only when no tag exists for ``operation``.
    """
    tag = sql_table(type(repository)).get(operation)
    if tag is not None:
        return tag.template
    logger.debug(
        "No SQL tag, using fallback",
        extra={"repository": type(repository).__name__, "operation": operation.value},
    )
    return fallback()
