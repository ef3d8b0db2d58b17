"""Simulation configuration.

:class:`SimulationConfig` gathers every tunable of a session in one frozen
dataclass. Defaults reproduce the reference scene: a 10x10 grid, the
controlled unit starting at ``(5, 0)`` and the pursuer at ``(4, 9)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple

from grid_pursuit.pathfinding import FRONTIER_REGISTRY
from grid_pursuit.types import Anchor

Coord = Tuple[int, int]


@dataclass(frozen=True)
class SimulationConfig:
    """Session configuration.

    Attributes:
        width (int): Grid width in cells.
        height (int): Grid height in cells.
        tile_size (float): World size of one tile.
        tile_spacing (float): World gap between adjacent tiles.
        origin (Anchor): World point the grid is centred on.
        controlled_start (Coord): Initial cell of the controlled unit.
        pursuer_start (Coord): Initial cell of the pursuer.
        reset_position (Coord): Cell the controlled unit returns to on reset.
        controlled_speed (float): World units per unit of tick for the controlled unit.
        pursuer_speed (float): World units per unit of tick for the pursuer.
        height_above_ground (float): Vertical offset of entity anchors.
        frontier (str): Open-set implementation name (see ``FRONTIER_REGISTRY``).
    """

    width: int = 10
    height: int = 10
    tile_size: float = 1.0
    tile_spacing: float = 0.1
    origin: Anchor = (0.0, 0.0, 0.0)
    controlled_start: Coord = (5, 0)
    pursuer_start: Coord = (4, 9)
    reset_position: Coord = (0, 0)
    controlled_speed: float = 5.0
    pursuer_speed: float = 4.0
    height_above_ground: float = 0.5
    frontier: str = "scan"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Grid dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.tile_size <= 0 or self.tile_spacing < 0:
            raise ValueError("tile_size must be positive and tile_spacing non-negative")
        if self.controlled_speed <= 0 or self.pursuer_speed <= 0:
            raise ValueError("Movement speeds must be positive")
        if self.frontier not in FRONTIER_REGISTRY:
            raise ValueError(
                f"Unknown frontier {self.frontier!r}; "
                f"expected one of {sorted(FRONTIER_REGISTRY)}"
            )
        for name in ("controlled_start", "pursuer_start", "reset_position"):
            x, y = getattr(self, name)
            if not (0 <= x < self.width and 0 <= y < self.height):
                raise ValueError(
                    f"{name} {(x, y)} is outside the {self.width}x{self.height} grid"
                )
        if self.controlled_start == self.pursuer_start:
            raise ValueError("controlled_start and pursuer_start must differ")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> SimulationConfig:
        """Build a config from plain settings (e.g. parsed JSON/TOML).

        Sequences are converted to tuples. Unknown keys raise ``ValueError``.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        kwargs = {
            key: tuple(value) if isinstance(value, (list, tuple)) else value
            for key, value in values.items()
        }
        return cls(**kwargs)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Opt-in console logging for applications embedding the simulation."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
