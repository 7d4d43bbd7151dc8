from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .address import Address


@dataclass
class Person:
    """A person record.

    ``dob`` must be timezone-aware; it is stored as UTC, and aware datetimes
    compare by instant, so a re-fetched person equals the one saved.
    """

    first_name: str
    last_name: str
    dob: datetime
    id: int | None = None
    salary: Decimal = field(default_factory=lambda: Decimal("0"))
    email: Optional[str] = None
    home_address: Optional[Address] = None

    def __post_init__(self) -> None:
        if self.dob.tzinfo is None:
            raise ValueError("dob must be timezone-aware")
