"""Direction enumerations.

``NEIGHBOR_DIRECTIONS`` is the canonical neighbour enumeration order
(+y, -y, -x, +x). Both the pathfinder and the turn coordinator iterate it, and
it is the sole tie-break source that keeps search results deterministic.
"""

from enum import StrEnum, auto
from typing import Dict, List, Tuple


class Direction(StrEnum):
    """Orthogonal grid direction (also used as an entity's facing).

    Members:
        UP: +y.
        DOWN: -y.
        LEFT: -x.
        RIGHT: +x.
    """

    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()


NEIGHBOR_DIRECTIONS: List[Direction] = [
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
]

DIRECTION_DELTAS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


def direction_from_delta(dx: int, dy: int) -> Direction:
    """Map a unit orthogonal step back to its ``Direction``."""
    for direction, delta in DIRECTION_DELTAS.items():
        if delta == (dx, dy):
            return direction
    raise ValueError(f"Not an orthogonal unit step: {(dx, dy)}")
