from typing import Iterable, Sequence

from grid_pursuit.components import Position
from grid_pursuit.grid import GridModel
from grid_pursuit.pathfinding import Found, PathResult
from grid_pursuit.systems.movement import MovementExecutor
from grid_pursuit.types import AdvanceResult, EntityID
from grid_pursuit.utils.grid import is_adjacent, manhattan_distance


def make_grid(
    width: int = 10,
    height: int = 10,
    obstacles: Iterable[tuple[int, int]] = (),
    occupants: dict[tuple[int, int], EntityID] | None = None,
) -> GridModel:
    """Grid with the given obstacle cells and raw occupant entries."""
    grid = GridModel(width, height)
    for x, y in obstacles:
        grid.set_obstacle(x, y, True)
    for (x, y), eid in (occupants or {}).items():
        grid.set_occupant(x, y, eid)
    return grid


def row_wall(y: int, width: int = 10, gaps: Sequence[int] = ()) -> list[tuple[int, int]]:
    """Obstacle cells filling row ``y`` except the ``gaps`` columns."""
    return [(x, y) for x in range(width) if x not in gaps]


def path_of(result: PathResult) -> list[Position]:
    assert isinstance(result, Found), f"Expected a path, got {result}"
    return list(result.path)


def assert_orthogonal_path(
    path: Sequence[Position], start: Position, target: Position
) -> None:
    """Start..target inclusive, unit orthogonal steps, no repeated cell."""
    assert path[0] == start
    assert path[-1] == target
    for a, b in zip(path, path[1:]):
        assert is_adjacent(a, b), f"{a} -> {b} is not an orthogonal step"
    assert len(set(path)) == len(path), f"Path revisits a cell: {path}"


def occupied_cells(grid: GridModel, entity_id: EntityID) -> list[Position]:
    """Every cell whose occupant names ``entity_id``."""
    return [pos for pos, eid in grid.snapshot().occupants.items() if eid == entity_id]


def walk_to_end(executor: MovementExecutor, step: float = 1.0, limit: int = 1000) -> list[AdvanceResult]:
    """Advance until idle and return every tick result (excluding the final IDLE)."""
    results: list[AdvanceResult] = []
    for _ in range(limit):
        result = executor.advance(step)
        if result == AdvanceResult.IDLE:
            return results
        results.append(result)
    raise AssertionError(f"Executor still moving after {limit} ticks")


def progress(path: Sequence[Position]) -> list[int]:
    """Manhattan distance from the path start to each cell."""
    return [manhattan_distance(path[0], pos) for pos in path]
