"""Failures raised by the repository layer.

Lower-level ``sqlite3`` exceptions are wrapped so callers handle one stable
hierarchy rooted at :class:`RepositoryError`.
"""

from __future__ import annotations

import copy
from typing import Any


class RepositoryError(RuntimeError):
    """Base class for repository failures."""


class SaveError(RepositoryError):
    """Raised when inserting an entity, or binding its parameters, fails."""

    def __init__(self, entity: Any, message: str | None = None) -> None:
        super().__init__(message or f"Tried to save entity: {entity!r}")
        self.entity = copy.deepcopy(entity)


class ExecutionError(RepositoryError):
    """Raised when a query, update or delete statement fails."""


class MisconfigurationError(RepositoryError):
    """Raised for programmer errors in entity or repository definitions."""


class DuplicateSqlError(MisconfigurationError):
    """Raised when one repository class declares two templates for an operation."""


class TransientEntityError(RepositoryError):
    """Raised when an operation needs the identity of an entity that was never saved."""
