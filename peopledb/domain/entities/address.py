from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..value_objects.enums import Region


@dataclass
class Address:
    id: int | None
    street_address: str
    address2: Optional[str]
    city: str
    state: str
    postcode: str
    county: Optional[str]
    region: Region
    country: str
