"""Cell description returned to the presentation side for hover/info display."""

from dataclasses import dataclass

from grid_pursuit.components.properties.position import Position
from grid_pursuit.types import Anchor


@dataclass(frozen=True)
class CellDescription:
    """Read-only snapshot of one cell.

    Attributes:
        position: Grid coordinates of the cell.
        world_anchor: Opaque world point the renderer places the cell at.
        has_obstacle: Whether the cell is blocked by an obstacle.
    """

    position: Position
    world_anchor: Anchor
    has_obstacle: bool

    @property
    def info(self) -> str:
        """Multi-line text used by hover tooltips."""
        x, y, z = self.world_anchor
        return (
            f"Grid Position: ({self.position.x}, {self.position.y})\n"
            f"World Position: ({x:.2f}, {y:.2f}, {z:.2f})\n"
            f"Obstacle: {'Yes' if self.has_obstacle else 'No'}"
        )
