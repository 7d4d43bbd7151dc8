"""Repository engine and implementations.

This package defines the generic :class:`~peopledb.repositories.crud.CrudRepository`
engine, the ``@sql`` metadata it resolves statements from, and concrete
SQLite repositories under :mod:`peopledb.repositories.sqlite`.
"""
from __future__ import annotations

from .crud import CrudRepository
from .errors import (
    DuplicateSqlError,
    ExecutionError,
    MisconfigurationError,
    RepositoryError,
    SaveError,
    TransientEntityError,
)
from .identity import assign_identity, identity_of
from .sql import CrudOperation, SqlTag, resolve_sql, sql

__all__ = [
    "CrudOperation",
    "CrudRepository",
    "DuplicateSqlError",
    "ExecutionError",
    "MisconfigurationError",
    "RepositoryError",
    "SaveError",
    "SqlTag",
    "TransientEntityError",
    "assign_identity",
    "identity_of",
    "resolve_sql",
    "sql",
]
