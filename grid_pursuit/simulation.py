"""Top-level orchestration.

:class:`Simulation` owns the :class:`grid_pursuit.grid.GridModel` and wires it
by explicit reference into the two movement executors and the turn
coordinator. It is the entry point for the input collaborator
(:meth:`Simulation.request_move`), the scheduling loop (:meth:`Simulation.tick`)
and the presentation collaborator (anchors, facing, cell descriptions).

Per tick, the controlled unit advances before the pursuer. If the controlled
unit comes to rest on a new cell during its advance, the coordinator issues
the pursuer's move request immediately, so the pursuer starts walking in the
same tick.
"""

import logging
from functools import partial
from typing import Dict, Optional

from grid_pursuit.actions import Direction
from grid_pursuit.components import CellDescription, Movement, Position
from grid_pursuit.config import SimulationConfig
from grid_pursuit.grid import GridModel
from grid_pursuit.levels.layout import ObstacleLayout
from grid_pursuit.pathfinding import FRONTIER_REGISTRY, PathFn, find_path
from grid_pursuit.systems.movement import MovementExecutor
from grid_pursuit.systems.turn import TurnCoordinator
from grid_pursuit.types import AdvanceResult, Anchor, EntityID, MoveResult

logger = logging.getLogger(__name__)

CONTROLLED_ID: EntityID = 0
PURSUER_ID: EntityID = 1


class Simulation:
    """Controlled unit, pursuer and grid wired together.

    Args:
        config: Session configuration (defaults to the reference scene).
        layout: Optional obstacle layout applied before entities are placed.
        controlled_id: Occupant id of the controlled unit.
        pursuer_id: Occupant id of the pursuer.

    Raises:
        ValueError: If a start cell is blocked by the layout or the ids clash.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        layout: Optional[ObstacleLayout] = None,
        controlled_id: EntityID = CONTROLLED_ID,
        pursuer_id: EntityID = PURSUER_ID,
    ) -> None:
        self.config = config if config is not None else SimulationConfig()
        cfg = self.config
        if controlled_id == pursuer_id:
            raise ValueError("controlled_id and pursuer_id must differ")

        self.grid = GridModel(
            cfg.width,
            cfg.height,
            tile_size=cfg.tile_size,
            tile_spacing=cfg.tile_spacing,
            origin=cfg.origin,
        )
        if layout is not None:
            layout.apply_to(self.grid)

        self.pathfinder: PathFn = partial(
            find_path, frontier=FRONTIER_REGISTRY[cfg.frontier]
        )
        self.controlled = MovementExecutor(
            controlled_id,
            self.grid,
            Position(*cfg.controlled_start),
            move_speed=cfg.controlled_speed,
            height_above_ground=cfg.height_above_ground,
            pathfinder=self.pathfinder,
        )
        self.pursuer = MovementExecutor(
            pursuer_id,
            self.grid,
            Position(*cfg.pursuer_start),
            move_speed=cfg.pursuer_speed,
            height_above_ground=cfg.height_above_ground,
            pathfinder=self.pathfinder,
        )
        self.coordinator = TurnCoordinator(
            self.grid, self.controlled, self.pursuer, pathfinder=self.pathfinder
        )
        self._executors: Dict[EntityID, MovementExecutor] = {
            controlled_id: self.controlled,
            pursuer_id: self.pursuer,
        }
        self.ticks = 0
        logger.info("Simulation initialized: %r", self.grid)

    # -------- Input --------

    def executor(self, entity_id: EntityID) -> MovementExecutor:
        """Return the executor for ``entity_id``; ``KeyError`` if unknown."""
        try:
            return self._executors[entity_id]
        except KeyError:
            raise KeyError(f"Unknown entity {entity_id}") from None

    def request_move(self, entity_id: EntityID, target_x: int, target_y: int) -> MoveResult:
        """Ask ``entity_id`` to walk to ``(target_x, target_y)``.

        Raises:
            KeyError: If the entity is unknown.
            OutOfRange: If the target lies outside the grid.
        """
        return self.executor(entity_id).move_request(Position(target_x, target_y))

    # -------- Scheduling --------

    def tick(self, step: float) -> Dict[EntityID, AdvanceResult]:
        """Advance both entities by one scheduling tick."""
        results = {
            self.controlled.entity_id: self.controlled.advance(step),
            self.pursuer.entity_id: self.pursuer.advance(step),
        }
        self.ticks += 1
        return results

    @property
    def is_idle(self) -> bool:
        return not (self.controlled.is_moving or self.pursuer.is_moving)

    def run_until_idle(self, step: float, max_ticks: int = 10_000) -> int:
        """Tick until neither entity is moving; returns the ticks taken.

        Raises:
            RuntimeError: If movement has not finished after ``max_ticks``.
        """
        taken = 0
        while not self.is_idle:
            if taken >= max_ticks:
                raise RuntimeError(f"Entities still moving after {max_ticks} ticks")
            self.tick(step)
            taken += 1
        return taken

    # -------- Scene management --------

    def reset_controlled(self) -> None:
        """Stop the controlled unit and put it back on the reset cell."""
        self.controlled.stop(notify=False)
        self.controlled.place(Position(*self.config.reset_position))
        logger.info("Controlled unit reset to %s", self.controlled.position)

    def refresh_obstacles(self, layout: ObstacleLayout) -> int:
        """Replace the grid obstacles with ``layout``; returns the obstacle count."""
        applied = layout.apply_to(self.grid)
        logger.info("Generated %d obstacles", applied)
        return applied

    # -------- Presentation queries --------

    def describe_cell(self, x: int, y: int) -> CellDescription:
        return self.grid.describe_cell(x, y)

    def anchor(self, entity_id: EntityID) -> Anchor:
        return self.executor(entity_id).anchor

    def facing(self, entity_id: EntityID) -> Direction:
        return self.executor(entity_id).facing

    def movement(self, entity_id: EntityID) -> Movement:
        return self.executor(entity_id).state
