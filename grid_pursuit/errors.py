"""Exceptions raised for programming / input errors.

Only coordinate errors are exceptional. Blocked targets, exhausted searches
and busy entities are reported through :class:`grid_pursuit.types.MoveResult`
and :class:`grid_pursuit.pathfinding.NotFound` instead.
"""


class OutOfRange(IndexError):
    """Coordinate outside the grid rectangle. Never silently clamped."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Out of bounds: {(x, y)} for grid {width}x{height}")
        self.x = x
        self.y = y
        self.width = width
        self.height = height
