
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

MAX_TICKS = 10


def axis_range(lo: float, hi: float) -> Tuple[float, float]:
    """Range anchored at zero, widened when it would be empty."""
    lo = min(0.0, float(lo))
    hi = float(hi)
    if hi <= lo:
        hi = lo + 1.0
    return lo, hi


def axis_labels(lo: float, hi: float, n_points: int) -> List[str]:
    """Evenly spaced labels from lo to hi, at most MAX_TICKS intervals."""
    if n_points <= 0:
        return ["0.0", "1.0"]
    n = min(MAX_TICKS, n_points)
    return [f"{lo + i / n * (hi - lo):.1f}" for i in range(n + 1)]


@dataclass
class ChartAxis:
    # value anchors
    v0: float
    v1: float
    # number of cells along the axis
    cells: int

    def is_valid(self) -> bool:
        return self.cells > 0 and self.v0 != self.v1

    def value_to_cell(self, v) -> np.ndarray:
        t = (np.asarray(v, dtype=float) - self.v0) / (self.v1 - self.v0)
        idx = np.rint(t * (self.cells - 1)).astype(int)
        return np.clip(idx, 0, self.cells - 1)


def rasterize(
    points: Sequence[Tuple[float, float]],
    width: int,
    height: int,
    x_range: Tuple[float, float],
    y_range: Tuple[float, float],
) -> np.ndarray:
    """
    Boolean (height, width) grid with a cell set for every point.

    Row 0 is the top of the chart. Points outside the ranges land on the
    nearest border cell.
    """
    grid = np.zeros((max(0, height), max(0, width)), dtype=bool)
    if width <= 0 or height <= 0 or not points:
        return grid

    arr = np.asarray(points, dtype=float).reshape(-1, 2)
    xa = ChartAxis(x_range[0], x_range[1], width)
    ya = ChartAxis(y_range[0], y_range[1], height)
    if not (xa.is_valid() and ya.is_valid()):
        return grid

    cols = xa.value_to_cell(arr[:, 0])
    rows = (height - 1) - ya.value_to_cell(arr[:, 1])
    grid[rows, cols] = True
    return grid


def grid_to_lines(grid: np.ndarray, mark: str = "•", blank: str = " ") -> List[str]:
    return ["".join(mark if cell else blank for cell in row) for row in grid]
