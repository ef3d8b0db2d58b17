"""Per-entity movement state.

``Movement`` is owned by exactly one
:class:`grid_pursuit.systems.movement.MovementExecutor`; every transition
produces a new instance via ``dataclasses.replace``. ``anchor`` and ``facing``
are presentation data derived from movement progress, the rest is the state
machine proper.
"""

from dataclasses import dataclass
from typing import Optional

from pyrsistent import pvector
from pyrsistent.typing import PVector

from grid_pursuit.actions import Direction
from grid_pursuit.components.properties.position import Position
from grid_pursuit.types import Anchor, Phase


@dataclass(frozen=True)
class Movement:
    """Movement state machine snapshot.

    Attributes:
        position: Cell the entity currently occupies in the grid.
        anchor: Current (interpolated) world point of the entity.
        phase: ``IDLE`` or ``MOVING``.
        path: Remaining cells to visit, excluding the starting cell. Empty
            while idle.
        cursor: Index into ``path`` of the next cell to enter.
        facing: Direction of the most recent (or current) step.
    """

    position: Position
    anchor: Anchor
    phase: Phase = Phase.IDLE
    path: PVector[Position] = pvector()
    cursor: int = 0
    facing: Direction = Direction.UP

    @property
    def next_cell(self) -> Optional[Position]:
        """Cell currently being walked into, ``None`` when idle."""
        if self.phase != Phase.MOVING or self.cursor >= len(self.path):
            return None
        return self.path[self.cursor]

    @property
    def remaining(self) -> int:
        """Number of cell transitions left on the active path."""
        return len(self.path) - self.cursor
