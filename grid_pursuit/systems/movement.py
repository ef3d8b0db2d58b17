"""Per-entity move execution.

A :class:`MovementExecutor` turns a path from
:func:`grid_pursuit.pathfinding.find_path` into a sequence of cell-to-cell
occupancy transfers on the shared :class:`grid_pursuit.grid.GridModel`.

State machine::

    IDLE --move_request ok--> MOVING --path exhausted--> IDLE
                              MOVING --stop()---------> IDLE

Movement is resumable rather than blocking: the scheduling loop calls
:meth:`MovementExecutor.advance` once per tick while the entity is moving.
Each call interpolates the entity's world anchor toward the next cell and,
on arrival, performs exactly one atomic transfer:

1. clear the occupant of the old cell,
2. set the occupant of the new cell,
3. update the cached position and advance the cursor.

Paths are fixed when requested. Obstacles or occupants appearing later on the
path do not trigger a re-plan; the entity still walks onto those cells.

When the entity comes to rest (path exhausted, ``stop()`` mid-path, or an
explicit ``place()``), every subscribed listener receives
``(entity_id, position)``. :class:`grid_pursuit.systems.turn.TurnCoordinator`
relies on this notification instead of polling.
"""

import logging
from dataclasses import replace
from typing import Callable, List

from pyrsistent import pvector

from grid_pursuit.actions import Direction, direction_from_delta
from grid_pursuit.components import Movement, Position
from grid_pursuit.errors import OutOfRange
from grid_pursuit.grid import GridModel
from grid_pursuit.pathfinding import Found, PathFn, find_path
from grid_pursuit.types import (
    AdvanceResult,
    Anchor,
    EntityID,
    MoveResult,
    Phase,
    SettledListener,
)
from grid_pursuit.utils.math import distance, move_towards, offset

logger = logging.getLogger(__name__)

ARRIVAL_EPSILON = 0.01


class MovementExecutor:
    """Move-execution state machine for one entity.

    The executor places the entity on ``position`` at construction, writing
    the grid occupant.

    Args:
        entity_id: Id written into the grid's occupant field.
        grid: Shared grid model.
        position: Initial cell.
        move_speed: World units travelled per unit of ``step``.
        height_above_ground: Vertical offset added to cell anchors.
        pathfinder: Path search function (defaults to scan-frontier A*).

    Raises:
        OutOfRange: If ``position`` lies outside the grid.
        ValueError: If ``position`` is blocked or ``move_speed`` is not positive.
    """

    def __init__(
        self,
        entity_id: EntityID,
        grid: GridModel,
        position: Position,
        move_speed: float = 5.0,
        height_above_ground: float = 0.5,
        pathfinder: PathFn = find_path,
    ) -> None:
        if move_speed <= 0:
            raise ValueError(f"move_speed must be positive, got {move_speed}")
        self._entity_id = entity_id
        self._grid = grid
        self._move_speed = move_speed
        self._height = height_above_ground
        self._find_path = pathfinder
        self._listeners: List[SettledListener] = []
        self._check_placeable(position)
        grid.set_occupant(position.x, position.y, entity_id)
        self._state = Movement(position=position, anchor=self._anchor_of(position))

    # -------- Read access --------

    @property
    def entity_id(self) -> EntityID:
        return self._entity_id

    @property
    def grid(self) -> GridModel:
        return self._grid

    @property
    def state(self) -> Movement:
        """Current immutable movement snapshot."""
        return self._state

    @property
    def position(self) -> Position:
        return self._state.position

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def is_moving(self) -> bool:
        return self._state.phase == Phase.MOVING

    @property
    def anchor(self) -> Anchor:
        return self._state.anchor

    @property
    def facing(self) -> Direction:
        return self._state.facing

    # -------- Commands --------

    def subscribe(self, listener: SettledListener) -> Callable[[], None]:
        """Register a settled listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def move_request(self, target: Position) -> MoveResult:
        """Plan a path to ``target`` and start walking it.

        Returns:
            MoveResult: ``BUSY`` while already moving (state untouched),
            ``NO_PATH`` when the search fails, ``OK`` otherwise. A request for
            the current cell is an ``OK`` no-op.

        Raises:
            OutOfRange: If ``target`` lies outside the grid.
        """
        if self._state.phase == Phase.MOVING:
            logger.warning("Entity %d is already moving", self._entity_id)
            return MoveResult.BUSY

        result = self._find_path(self._grid, self._state.position, target)
        if not isinstance(result, Found):
            logger.warning(
                "Entity %d has no path from %s to %s",
                self._entity_id,
                self._state.position,
                target,
            )
            return MoveResult.NO_PATH

        path = result.path
        if len(path) == 1:
            return MoveResult.OK
        if path[0] == self._state.position:
            path = path[1:]

        self._state = replace(
            self._state, phase=Phase.MOVING, path=pvector(path), cursor=0
        )
        logger.debug(
            "Entity %d moving %s -> %s (%d steps)",
            self._entity_id,
            self._state.position,
            target,
            len(path),
        )
        return MoveResult.OK

    def advance(self, step: float) -> AdvanceResult:
        """Progress movement by one scheduling tick of length ``step``.

        Returns:
            AdvanceResult: ``IDLE`` if not moving, ``ARRIVED`` if a cell
            transition happened during this tick, ``STILL_MOVING`` otherwise.
        """
        if step < 0:
            raise ValueError(f"step must be non-negative, got {step}")
        next_cell = self._state.next_cell
        if next_cell is None:
            return AdvanceResult.IDLE

        target_anchor = self._anchor_of(next_cell)
        anchor = move_towards(
            self._state.anchor, target_anchor, self._move_speed * step
        )
        self._state = replace(
            self._state, anchor=anchor, facing=self._facing_towards(next_cell)
        )
        if distance(anchor, target_anchor) <= ARRIVAL_EPSILON:
            return self.arrive()
        return AdvanceResult.STILL_MOVING

    def arrive(self) -> AdvanceResult:
        """Commit arrival on the next path cell.

        Callers that judge arrival themselves (e.g. an animation system) call
        this directly instead of :meth:`advance`.
        """
        state = self._state
        next_cell = state.next_cell
        if next_cell is None:
            return AdvanceResult.IDLE

        old = state.position
        self._grid.set_occupant(old.x, old.y, None)
        self._grid.set_occupant(next_cell.x, next_cell.y, self._entity_id)
        cursor = state.cursor + 1
        state = replace(
            state,
            position=next_cell,
            anchor=self._anchor_of(next_cell),
            cursor=cursor,
            facing=direction_from_delta(next_cell.x - old.x, next_cell.y - old.y),
        )
        if cursor >= len(state.path):
            state = replace(state, phase=Phase.IDLE, path=pvector(), cursor=0)
        self._state = state
        logger.debug(
            "Entity %d entered %s, %d cells left",
            self._entity_id,
            next_cell,
            state.remaining,
        )

        if state.phase == Phase.IDLE:
            logger.info(
                "Entity %d reached destination %s", self._entity_id, next_cell
            )
            self._notify_settled()
        return AdvanceResult.ARRIVED

    def stop(self, notify: bool = True) -> None:
        """Abort movement at the last confirmed cell. No rollback.

        Args:
            notify: Tell settled listeners. Pass False when the entity is
                about to be placed elsewhere, so listeners only ever see the
                cell it finally rests on.
        """
        if self._state.phase != Phase.MOVING:
            return
        self._state = replace(
            self._state,
            phase=Phase.IDLE,
            path=pvector(),
            cursor=0,
            anchor=self._anchor_of(self._state.position),
        )
        logger.info(
            "Entity %d stopped at %s", self._entity_id, self._state.position
        )
        if notify:
            self._notify_settled()

    def place(self, position: Position) -> None:
        """Teleport an idle entity to ``position``.

        Raises:
            OutOfRange: If ``position`` lies outside the grid.
            ValueError: If the entity is moving or the cell is blocked.
        """
        if self._state.phase == Phase.MOVING:
            raise ValueError(f"Entity {self._entity_id} cannot be placed while moving")
        self._check_placeable(position)
        old = self._state.position
        if self._grid.get_occupant(old.x, old.y) == self._entity_id:
            self._grid.set_occupant(old.x, old.y, None)
        self._grid.set_occupant(position.x, position.y, self._entity_id)
        self._state = replace(
            self._state, position=position, anchor=self._anchor_of(position)
        )
        self._notify_settled()

    # -------- Internal helpers --------

    def _check_placeable(self, position: Position) -> None:
        grid = self._grid
        if not grid.in_bounds(position.x, position.y):
            raise OutOfRange(position.x, position.y, grid.width, grid.height)
        if grid.get_obstacle(position.x, position.y):
            raise ValueError(f"Cannot place entity {self._entity_id} on obstacle {position}")
        occupant = grid.get_occupant(position.x, position.y)
        if occupant is not None and occupant != self._entity_id:
            raise ValueError(
                f"Cannot place entity {self._entity_id} on {position}: occupied by {occupant}"
            )

    def _anchor_of(self, position: Position) -> Anchor:
        return offset(self._grid.world_anchor(position.x, position.y), self._height)

    def _facing_towards(self, cell: Position) -> Direction:
        pos = self._state.position
        return direction_from_delta(cell.x - pos.x, cell.y - pos.y)

    def _notify_settled(self) -> None:
        for listener in list(self._listeners):
            listener(self._entity_id, self._state.position)
