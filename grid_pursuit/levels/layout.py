"""Obstacle layout: the raw bit layout persisted by the asset store.

A layout is the two grid dimensions plus a row-major boolean array of length
``width * height`` where index ``y * width + x`` is the obstacle flag of cell
``(x, y)``. Layouts are immutable value objects; editing returns a new layout.
They are applied to a live :class:`grid_pursuit.grid.GridModel` with
:meth:`ObstacleLayout.apply_to`.

Persistence uses ``numpy.savez`` with three arrays (``width``, ``height``,
``obstacles``); nothing else about the stored asset is interpreted.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Tuple, Union

import numpy as np

from grid_pursuit.errors import OutOfRange
from grid_pursuit.grid import GridModel

Coord = Tuple[int, int]


@dataclass(frozen=True, eq=False)
class ObstacleLayout:
    """Immutable obstacle bit layout.

    Attributes:
        width: Grid width in cells.
        height: Grid height in cells.
        cells: Read-only flat ``bool`` array of length ``width * height``.
    """

    width: int
    height: int
    cells: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Layout dimensions must be positive, got {self.width}x{self.height}"
            )
        cells = np.asarray(self.cells, dtype=bool).reshape(-1)
        if cells.shape[0] != self.width * self.height:
            raise ValueError(
                f"Obstacle array has {cells.shape[0]} entries, "
                f"expected {self.width * self.height} for {self.width}x{self.height}"
            )
        cells = cells.copy()
        cells.flags.writeable = False
        object.__setattr__(self, "cells", cells)

    # -------- Constructors --------

    @classmethod
    def empty(cls, width: int = 10, height: int = 10) -> ObstacleLayout:
        return cls(width, height, np.zeros(width * height, dtype=bool))

    @classmethod
    def from_cells(
        cls, width: int, height: int, obstacles: Iterable[Coord]
    ) -> ObstacleLayout:
        """Build a layout with obstacles at the given ``(x, y)`` coordinates."""
        layout = cls.empty(width, height)
        cells = layout.cells.copy()
        for x, y in obstacles:
            cells[layout._index(x, y)] = True
        return cls(width, height, cells)

    @classmethod
    def from_grid(cls, grid: GridModel) -> ObstacleLayout:
        """Capture the current obstacle flags of ``grid``."""
        snapshot = grid.snapshot()
        cells = np.array(list(snapshot.obstacles), dtype=bool)
        return cls(snapshot.width, snapshot.height, cells)

    # -------- Queries --------

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfRange(x, y, self.width, self.height)
        return y * self.width + x

    def has_obstacle(self, x: int, y: int) -> bool:
        return bool(self.cells[self._index(x, y)])

    def obstacles(self) -> list[Coord]:
        """All obstacle coordinates in row-major order."""
        return [
            (int(i % self.width), int(i // self.width))
            for i in np.flatnonzero(self.cells)
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObstacleLayout):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and bool(np.array_equal(self.cells, other.cells))
        )

    def __hash__(self) -> int:
        return hash((self.width, self.height, self.cells.tobytes()))

    # -------- Editing --------

    def with_obstacle(self, x: int, y: int, value: bool = True) -> ObstacleLayout:
        cells = self.cells.copy()
        cells[self._index(x, y)] = value
        return ObstacleLayout(self.width, self.height, cells)

    def cleared(self) -> ObstacleLayout:
        return ObstacleLayout.empty(self.width, self.height)

    def apply_to(self, grid: GridModel) -> int:
        """Replace every obstacle flag of ``grid`` with this layout.

        Occupants are untouched. Returns the number of obstacles applied.

        Raises:
            ValueError: If the grid dimensions differ from the layout's.
        """
        if (grid.width, grid.height) != (self.width, self.height):
            raise ValueError(
                f"Layout is {self.width}x{self.height} but grid is {grid.width}x{grid.height}"
            )
        grid.clear_all_obstacles()
        coords = self.obstacles()
        for x, y in coords:
            grid.set_obstacle(x, y, True)
        return len(coords)

    # -------- Persistence --------

    def save(self, path: Union[str, PathLike[str]]) -> None:
        np.savez(
            path,
            width=np.int64(self.width),
            height=np.int64(self.height),
            obstacles=self.cells,
        )

    @classmethod
    def load(cls, path: Union[str, PathLike[str]]) -> ObstacleLayout:
        """Read a layout written by :meth:`save`.

        Raises:
            ValueError: If the stored array length does not match the stored
                dimensions.
        """
        with np.load(path) as data:
            return cls(
                int(data["width"]),
                int(data["height"]),
                np.array(data["obstacles"], dtype=bool),
            )
