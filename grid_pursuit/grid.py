"""Grid model: dimensions, obstacles, occupants and world anchors.

:class:`GridModel` is the single source of truth for walkability. It is the
only shared mutable resource in a simulation; each store is a persistent
structure (``pyrsistent``) that is swapped wholesale on mutation, so
:meth:`GridModel.snapshot` is O(1) and snapshots never observe later writes.

Design notes:

* Obstacles are kept as a row-major ``PVector[bool]`` of length
  ``width * height`` (index ``y * width + x``), the same layout used by
  :class:`grid_pursuit.levels.layout.ObstacleLayout`.
* Occupants are a sparse ``PMap[Position, EntityID]``; absence of a key means
  the cell is empty. ``set_occupant`` overwrites unconditionally, the
  movement executors are responsible for writing only cells on their own path.
* World anchors are computed once at construction and passed through
  untouched to the rendering side.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pyrsistent import pmap, pvector
from pyrsistent.typing import PMap, PVector

from grid_pursuit.components import CellDescription, Position
from grid_pursuit.errors import OutOfRange
from grid_pursuit.types import Anchor, EntityID
from grid_pursuit.utils.grid import cell_anchor

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 10
DEFAULT_HEIGHT = 10


@dataclass(frozen=True)
class GridSnapshot:
    """Immutable view of a grid at one point in time.

    Attributes:
        width (int): Grid width in cells.
        height (int): Grid height in cells.
        obstacles (PVector[bool]): Row-major obstacle flags.
        occupants (PMap[Position, EntityID]): Occupied cells.
    """

    width: int
    height: int
    obstacles: PVector[bool]
    occupants: PMap[Position, EntityID]


class GridModel:
    """Fixed-size square grid of cells.

    Args:
        width: Number of columns (default 10).
        height: Number of rows (default 10).
        tile_size: World size of one tile, used for anchors only.
        tile_spacing: World gap between tiles, used for anchors only.
        origin: World point the grid is centred on.

    Raises:
        ValueError: If ``width`` or ``height`` is not positive.
    """

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        tile_size: float = 1.0,
        tile_spacing: float = 0.1,
        origin: Anchor = (0.0, 0.0, 0.0),
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self._obstacles: PVector[bool] = pvector([False] * (width * height))
        self._occupants: PMap[Position, EntityID] = pmap()
        self._anchors: PVector[Anchor] = pvector(
            cell_anchor(x, y, width, height, tile_size, tile_spacing, origin)
            for y in range(height)
            for x in range(width)
        )
        logger.debug("Grid generated: %dx%d tiles", width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    # -------- Bounds --------

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies within the grid rectangle."""
        return 0 <= x < self._width and 0 <= y < self._height

    def _index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise OutOfRange(x, y, self._width, self._height)
        return y * self._width + x

    # -------- Obstacles --------

    def get_obstacle(self, x: int, y: int) -> bool:
        return self._obstacles[self._index(x, y)]

    def set_obstacle(self, x: int, y: int, value: bool) -> None:
        """Set or clear the obstacle flag of one cell.

        Paths that are already being walked are not re-planned.
        """
        self._obstacles = self._obstacles.set(self._index(x, y), bool(value))

    def clear_all_obstacles(self) -> None:
        """Reset every obstacle flag to False. Occupants are untouched."""
        self._obstacles = pvector([False] * (self._width * self._height))

    def obstacle_count(self) -> int:
        return sum(1 for flag in self._obstacles if flag)

    # -------- Occupants --------

    def get_occupant(self, x: int, y: int) -> Optional[EntityID]:
        self._index(x, y)
        return self._occupants.get(Position(x, y))

    def set_occupant(self, x: int, y: int, entity_id: Optional[EntityID]) -> None:
        """Overwrite the occupant of ``(x, y)``; ``None`` empties the cell.

        Low-level mutation reserved for the movement executors. No uniqueness
        check is performed here.
        """
        self._index(x, y)
        pos = Position(x, y)
        if entity_id is None:
            self._occupants = self._occupants.discard(pos)
        else:
            self._occupants = self._occupants.set(pos, entity_id)

    def find_occupant(self, entity_id: EntityID) -> Optional[Position]:
        """Return the cell naming ``entity_id`` as occupant, if any."""
        for pos, eid in self._occupants.items():
            if eid == entity_id:
                return pos
        return None

    # -------- Walkability --------

    def is_walkable(self, x: int, y: int) -> bool:
        """In bounds, no obstacle and no occupant."""
        if not self.in_bounds(x, y):
            return False
        return (
            not self._obstacles[y * self._width + x]
            and Position(x, y) not in self._occupants
        )

    # -------- Presentation --------

    def world_anchor(self, x: int, y: int) -> Anchor:
        return self._anchors[self._index(x, y)]

    def describe_cell(self, x: int, y: int) -> CellDescription:
        """Return coordinates, world anchor and obstacle flag of one cell."""
        index = self._index(x, y)
        return CellDescription(
            position=Position(x, y),
            world_anchor=self._anchors[index],
            has_obstacle=self._obstacles[index],
        )

    def snapshot(self) -> GridSnapshot:
        return GridSnapshot(
            width=self._width,
            height=self._height,
            obstacles=self._obstacles,
            occupants=self._occupants,
        )

    def __repr__(self) -> str:
        return (
            f"GridModel(width={self._width}, height={self._height}, "
            f"obstacles={self.obstacle_count()}, occupants={len(self._occupants)})"
        )
