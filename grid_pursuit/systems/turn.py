"""Reactive pursuit coordinator.

There is no alternating turn protocol: the pursuer stays idle until the
controlled entity settles on a cell different from the last one observed,
then it walks to the best free cell orthogonally adjacent to it.

The coordinator subscribes to the controlled executor's settled
notification; :meth:`TurnCoordinator.observe` is the same check a polling
loop would run every tick and may still be called directly.
"""

import logging
from typing import Callable, Optional

from grid_pursuit.components import Position
from grid_pursuit.grid import GridModel
from grid_pursuit.pathfinding import Found, PathFn, find_path
from grid_pursuit.systems.movement import MovementExecutor
from grid_pursuit.types import EntityID, MoveResult, Phase
from grid_pursuit.utils.grid import is_adjacent, neighbors

logger = logging.getLogger(__name__)


class TurnCoordinator:
    """Couple the controlled entity's completed moves to the pursuer's reaction.

    Args:
        grid: Shared grid model.
        controlled: Executor of the entity being chased.
        pursuer: Executor of the chasing entity.
        pathfinder: Path search used to rank candidate cells.
        subscribe: Subscribe to ``controlled``'s settled notifications
            (default). Pass False to drive :meth:`observe` from a polling loop.
    """

    def __init__(
        self,
        grid: GridModel,
        controlled: MovementExecutor,
        pursuer: MovementExecutor,
        pathfinder: PathFn = find_path,
        subscribe: bool = True,
    ) -> None:
        self._grid = grid
        self._controlled = controlled
        self._pursuer = pursuer
        self._find_path = pathfinder
        self.last_observed_position: Position = controlled.position
        self._unsubscribe: Optional[Callable[[], None]] = (
            controlled.subscribe(self._on_settled) if subscribe else None
        )

    def close(self) -> None:
        """Stop listening to the controlled executor."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_settled(self, entity_id: EntityID, position: Position) -> None:
        self.observe()

    def observe(self) -> bool:
        """Trigger a pursuit if the controlled entity rests on a new cell.

        Returns:
            bool: True if :meth:`pursue` was invoked.
        """
        controlled = self._controlled
        if controlled.phase != Phase.IDLE:
            return False
        if controlled.position == self.last_observed_position:
            return False
        self.last_observed_position = controlled.position
        self.pursue()
        return True

    def pursue(self) -> Optional[Position]:
        """Send the pursuer toward the closest reachable cell next to the controlled entity.

        Candidate cells are the in-bounds walkable neighbours of the
        controlled entity, in order +y, -y, -x, +x. The one with the fewest
        path cells wins; the earlier candidate wins ties.

        Returns:
            Optional[Position]: The cell the pursuer was sent to, or ``None``
            when it is moving, already adjacent, or nothing is reachable.
        """
        pursuer = self._pursuer
        goal = self._controlled.position
        if pursuer.phase == Phase.MOVING:
            return None
        if is_adjacent(pursuer.position, goal):
            logger.debug("Pursuer %d already adjacent to %s", pursuer.entity_id, goal)
            return None

        best: Optional[Position] = None
        best_length = 0
        for _, cell in neighbors(goal):
            if not self._grid.is_walkable(cell.x, cell.y):
                continue
            result = self._find_path(self._grid, pursuer.position, cell)
            if isinstance(result, Found) and (best is None or len(result) < best_length):
                best = cell
                best_length = len(result)

        if best is None:
            logger.warning("Pursuer %d cannot reach any cell next to %s", pursuer.entity_id, goal)
            return None

        outcome = pursuer.move_request(best)
        if outcome != MoveResult.OK:
            return None
        logger.info("Pursuer %d heading to %s", pursuer.entity_id, best)
        return best
