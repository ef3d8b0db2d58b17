"""Vector utilities used by movement interpolation."""

from typing import Tuple

import numpy as np

from grid_pursuit.types import Anchor


def distance(a: Anchor, b: Anchor) -> float:
    """Euclidean distance between two world points."""
    return float(np.linalg.norm(np.subtract(b, a)))


def move_towards(current: Anchor, target: Anchor, max_delta: float) -> Anchor:
    """Move ``current`` towards ``target`` by at most ``max_delta``.

    Never overshoots: if the target is within ``max_delta`` it is returned
    unchanged.
    """
    if max_delta < 0:
        raise ValueError(f"max_delta must be non-negative, got {max_delta}")
    delta = np.subtract(target, current)
    dist = float(np.linalg.norm(delta))
    if dist <= max_delta or dist == 0.0:
        return target
    moved = np.add(current, delta / dist * max_delta)
    return _as_anchor(moved)


def offset(anchor: Anchor, dy: float) -> Anchor:
    """Raise ``anchor`` by ``dy`` along the world vertical axis."""
    return (anchor[0], anchor[1] + dy, anchor[2])


def _as_anchor(vec: np.ndarray) -> Tuple[float, float, float]:
    return (float(vec[0]), float(vec[1]), float(vec[2]))
