"""Position component.

Immutable integer grid coordinates. Used both as an entity's cached cell and
as the element type of every path produced by the pathfinder.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Grid coordinate.

    Attributes:
        x: Column index (0 at left).
        y: Row index (0 at the near edge, growing "up").
    """

    x: int
    y: int
