from __future__ import annotations

from typing import Any

from peopledb.domain.entity import Entity

from .errors import MisconfigurationError, TransientEntityError


def _require_contract(entity: Any) -> Entity:
    if not isinstance(entity, Entity):
        raise MisconfigurationError(
            f"no identity-tagged field found on {type(entity).__name__}"
        )
    return entity


def identity_of(entity: Any) -> int:
    """Return the store-assigned identity of ``entity``.

    Raises :class:`MisconfigurationError` when the type has no ``id`` member and
    :class:`TransientEntityError` when the entity was never saved.
    """
    value = _require_contract(entity).id
    if value is None:
        raise TransientEntityError(f"{type(entity).__name__} has no identity yet: {entity!r}")
    return int(value)


def assign_identity(entity: Any, value: int) -> None:
    """Write the generated key onto ``entity`` in place."""
    _require_contract(entity).id = int(value)
