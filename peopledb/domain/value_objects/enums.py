from enum import Enum


class Region(str, Enum):
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"

    @classmethod
    def parse(cls, value: str) -> "Region":
        """Return the region named by ``value`` regardless of case."""
        return cls(value.strip().upper())
