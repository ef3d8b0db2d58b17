"""Common type aliases and enumerations.

``EntityID`` identifies a grid occupant. ``Phase``, ``MoveResult`` and
``AdvanceResult`` are the explicit values exchanged between the movement
executor, the turn coordinator and whatever scheduling loop drives them; none
of the expected "can't move there" outcomes are raised as exceptions.
"""

from enum import StrEnum, auto
from typing import Callable, Tuple, TYPE_CHECKING


# Forward declaration for listener typing to avoid circular imports:
if TYPE_CHECKING:
    from grid_pursuit.components import Position

EntityID = int

Anchor = Tuple[float, float, float]
"""Opaque world-space point attached to each cell for the rendering side."""

SettledListener = Callable[["EntityID", "Position"], None]


class Phase(StrEnum):
    """Movement phase of a single entity."""

    IDLE = auto()
    MOVING = auto()


class MoveResult(StrEnum):
    """Outcome of a move request.

    Members:
        OK: Path accepted (or the entity already stands on the target).
        BUSY: The entity is already moving; the request was ignored.
        NO_PATH: The target is blocked or unreachable.
    """

    OK = auto()
    BUSY = auto()
    NO_PATH = auto()


class AdvanceResult(StrEnum):
    """Outcome of a single scheduling tick for one entity."""

    STILL_MOVING = auto()
    ARRIVED = auto()
    IDLE = auto()
