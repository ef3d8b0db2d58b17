"""Deterministic grid A* search.

:func:`find_path` is stateless: every call builds its own ephemeral
:class:`PathNode` records and reads walkability from the supplied
:class:`grid_pursuit.grid.GridModel`.

Search rules:

* Neighbours are generated in the fixed order +y, -y, -x, +x.
* Every orthogonal step costs 1; ``h`` is the Manhattan distance to target.
* The open node with the smallest ``f`` is expanded next; ties go to the node
  discovered first. Open nodes get their ``g`` / parent updated in place when
  a strictly cheaper route is found; closed nodes are never reopened.
* Non-walkable neighbours are closed directly without being queued.
* An exhausted open set is a normal outcome reported as :class:`NotFound`.

The open set is pluggable (:data:`FRONTIER_REGISTRY`). :class:`ScanFrontier`
is the plain linear scan; :class:`HeapFrontier` keys a binary heap on
``(f, discovery_seq)`` and yields exactly the same expansion order.
"""

import heapq
import logging
from dataclasses import dataclass
from itertools import count
from typing import Callable, Dict, List, Optional, Protocol, Set, Tuple, Union

from pyrsistent import pvector
from pyrsistent.typing import PVector

from grid_pursuit.components import Position
from grid_pursuit.errors import OutOfRange
from grid_pursuit.grid import GridModel
from grid_pursuit.utils.grid import manhattan_distance, neighbors

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class PathNode:
    """Per-search node record.

    Attributes:
        position: Cell coordinates.
        g: Steps taken from the start.
        h: Manhattan distance to the target.
        seq: Discovery order within the search (tie-break key).
        parent: Predecessor on the best known route.
    """

    position: Position
    g: int
    h: int
    seq: int
    parent: Optional["PathNode"] = None

    @property
    def f(self) -> int:
        return self.g + self.h


@dataclass(frozen=True)
class Found:
    """Successful search; ``path`` runs from start to target inclusive."""

    path: PVector[Position]

    def __len__(self) -> int:
        return len(self.path)


@dataclass(frozen=True)
class NotFound:
    """The target is blocked or unreachable."""


NOT_FOUND = NotFound()

PathResult = Union[Found, NotFound]


class Frontier(Protocol):
    """Open-set strategy used by :func:`find_path`."""

    def push(self, node: PathNode) -> None: ...

    def pop(self) -> PathNode: ...

    def get(self, pos: Position) -> Optional[PathNode]: ...

    def update(self, node: PathNode, g: int, parent: PathNode) -> None: ...

    def __len__(self) -> int: ...


class ScanFrontier:
    """List-backed open set with an O(n) lowest-``f`` scan.

    The list keeps discovery order, so the strict ``<`` comparison picks the
    earliest discovered node among equal ``f`` values.
    """

    def __init__(self) -> None:
        self._nodes: List[PathNode] = []
        self._by_pos: Dict[Position, PathNode] = {}

    def push(self, node: PathNode) -> None:
        self._nodes.append(node)
        self._by_pos[node.position] = node

    def pop(self) -> PathNode:
        best = self._nodes[0]
        for node in self._nodes[1:]:
            if node.f < best.f:
                best = node
        self._nodes.remove(best)
        del self._by_pos[best.position]
        return best

    def get(self, pos: Position) -> Optional[PathNode]:
        return self._by_pos.get(pos)

    def update(self, node: PathNode, g: int, parent: PathNode) -> None:
        node.g = g
        node.parent = parent

    def __len__(self) -> int:
        return len(self._nodes)


class HeapFrontier:
    """Binary-heap open set keyed on ``(f, seq)``.

    Updates push a fresh entry and leave the old one in the heap; stale
    entries are skipped on pop. Since updates only ever lower ``f`` the fresh
    entry always surfaces first.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[int, int, PathNode]] = []
        self._by_pos: Dict[Position, PathNode] = {}

    def push(self, node: PathNode) -> None:
        heapq.heappush(self._heap, (node.f, node.seq, node))
        self._by_pos[node.position] = node

    def pop(self) -> PathNode:
        while self._heap:
            f, _, node = heapq.heappop(self._heap)
            if self._by_pos.get(node.position) is node and f == node.f:
                del self._by_pos[node.position]
                return node
        raise IndexError("pop from empty frontier")

    def get(self, pos: Position) -> Optional[PathNode]:
        return self._by_pos.get(pos)

    def update(self, node: PathNode, g: int, parent: PathNode) -> None:
        node.g = g
        node.parent = parent
        heapq.heappush(self._heap, (node.f, node.seq, node))

    def __len__(self) -> int:
        return len(self._by_pos)


FrontierFactory = Callable[[], Frontier]

FRONTIER_REGISTRY: Dict[str, FrontierFactory] = {
    "scan": ScanFrontier,
    "heap": HeapFrontier,
}
"""Registry of open-set implementations selectable by name in configuration."""

PathFn = Callable[[GridModel, Position, Position], PathResult]


def find_path(
    grid: GridModel,
    start: Position,
    target: Position,
    frontier: FrontierFactory = ScanFrontier,
) -> PathResult:
    """Search a shortest orthogonal path from ``start`` to ``target``.

    Args:
        grid (GridModel): Grid providing bounds and walkability.
        start (Position): Starting cell. Its own walkability is not checked
            (it is normally occupied by the searching entity).
        target (Position): Goal cell; must be walkable unless equal to ``start``.
        frontier (FrontierFactory): Open-set implementation.

    Returns:
        PathResult: ``Found`` with the start..target path, or ``NOT_FOUND``.

    Raises:
        OutOfRange: If ``start`` or ``target`` lies outside the grid.
    """
    for pos in (start, target):
        if not grid.in_bounds(pos.x, pos.y):
            raise OutOfRange(pos.x, pos.y, grid.width, grid.height)

    if start == target:
        return Found(pvector([target]))

    if not grid.is_walkable(target.x, target.y):
        logger.debug("Target %s is not walkable", target)
        return NOT_FOUND

    seq = count()
    open_set = frontier()
    closed: Set[Position] = set()
    open_set.push(
        PathNode(start, 0, manhattan_distance(start, target), next(seq))
    )

    while len(open_set) > 0:
        current = open_set.pop()
        if current.position == target:
            return Found(_reconstruct(current))
        closed.add(current.position)

        for _, pos in neighbors(current.position):
            if not grid.in_bounds(pos.x, pos.y) or pos in closed:
                continue
            if not grid.is_walkable(pos.x, pos.y):
                closed.add(pos)
                continue
            tentative_g = current.g + 1
            existing = open_set.get(pos)
            if existing is None:
                open_set.push(
                    PathNode(
                        pos,
                        tentative_g,
                        manhattan_distance(pos, target),
                        next(seq),
                        current,
                    )
                )
            elif tentative_g < existing.g:
                open_set.update(existing, tentative_g, current)

    logger.debug("No path found from %s to %s", start, target)
    return NOT_FOUND


def _reconstruct(node: PathNode) -> PVector[Position]:
    """Walk parent links back to the start and reverse."""
    cells: List[Position] = []
    current: Optional[PathNode] = node
    while current is not None:
        cells.append(current.position)
        current = current.parent
    cells.reverse()
    return pvector(cells)
