"""grid_pursuit.components
=================================

Aggregate import surface for the value objects shared by the grid model, the
pathfinder and the movement systems::

    from grid_pursuit.components import Position, Movement

All component classes are frozen ``@dataclass`` value objects.
"""

from .properties import CellDescription
from .properties import Movement
from .properties import Position

__all__ = [
    "CellDescription",
    "Movement",
    "Position",
]
