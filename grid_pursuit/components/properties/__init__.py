"""Property component aggregates.

Immutable dataclasses describing grid coordinates, per-cell descriptions and
per-entity movement state. Creating a new instance is how state changes are
expressed; nothing here carries behaviour beyond derived read-only properties.
"""

from .cell import CellDescription
from .movement import Movement
from .position import Position

__all__ = [
    "CellDescription",
    "Movement",
    "Position",
]
