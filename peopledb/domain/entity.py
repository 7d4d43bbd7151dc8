from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Entity(Protocol):
    """Capability every persisted record exposes.

    ``id`` is ``None`` until the store assigns it on the first save and must
    not change afterwards.

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Tag:
    ...     name: str
    ...     id: int | None = None
    >>> isinstance(Tag("x"), Entity)
    True
    """

    id: Optional[int]
