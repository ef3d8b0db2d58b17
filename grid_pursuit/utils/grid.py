"""Grid math helpers.

Pure functions shared by the pathfinder and the turn coordinator. Functions
here are intentionally lightweight to keep the search inner loop fast.
"""

from typing import Iterator, Tuple

from grid_pursuit.actions import DIRECTION_DELTAS, NEIGHBOR_DIRECTIONS, Direction
from grid_pursuit.components import Position
from grid_pursuit.types import Anchor


def manhattan_distance(a: Position, b: Position) -> int:
    """Return ``|dx| + |dy|`` between two cells."""
    return abs(a.x - b.x) + abs(a.y - b.y)


def is_adjacent(a: Position, b: Position) -> bool:
    """Return True if ``a`` and ``b`` are orthogonal neighbours."""
    return manhattan_distance(a, b) == 1


def step(pos: Position, direction: Direction) -> Position:
    """Return the cell one step from ``pos`` in ``direction`` (unbounded)."""
    dx, dy = DIRECTION_DELTAS[direction]
    return Position(pos.x + dx, pos.y + dy)


def neighbors(pos: Position) -> Iterator[Tuple[Direction, Position]]:
    """Yield ``(direction, cell)`` pairs in the fixed order +y, -y, -x, +x.

    Bounds are not checked; callers filter with the grid.
    """
    for direction in NEIGHBOR_DIRECTIONS:
        yield direction, step(pos, direction)


def cell_anchor(
    x: int,
    y: int,
    width: int,
    height: int,
    tile_size: float = 1.0,
    tile_spacing: float = 0.1,
    origin: Anchor = (0.0, 0.0, 0.0),
) -> Anchor:
    """World point of the centre of cell ``(x, y)`` for a grid centred on ``origin``.

    Cells are laid out on the horizontal plane: grid ``x`` maps to world x and
    grid ``y`` to world z, with ``tile_spacing`` gaps between tiles.
    """
    pitch = tile_size + tile_spacing
    total_width = width * tile_size + (width - 1) * tile_spacing
    total_height = height * tile_size + (height - 1) * tile_spacing
    start_x = origin[0] - total_width / 2.0
    start_z = origin[2] - total_height / 2.0
    return (
        start_x + x * pitch + tile_size / 2.0,
        origin[1],
        start_z + y * pitch + tile_size / 2.0,
    )
