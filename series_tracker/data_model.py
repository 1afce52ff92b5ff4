from __future__ import annotations

import bisect
import logging
import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from .errors import IndexOutOfRange, InputValidationError

logger = logging.getLogger(__name__)

DEFAULT_SERIES_NAME = "Graph"
EMPTY_BOUNDS: Tuple[float, float] = (1.0, 1.0)
EMPTY_EXTENT: Tuple[float, float, float, float] = (0.0, 1.0, 0.0, 1.0)


class Point(NamedTuple):
    x: float
    y: float


@dataclass
class DataSeries:
    name: str
    # kept sorted by x; equal x values stay in insertion order
    data: List[Point] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.data)

    def insert(self, x: float, y: float) -> int:
        """Insert a point after any existing points with the same x. Returns its row."""
        xs = [p.x for p in self.data]
        row = bisect.bisect_right(xs, x)
        self.data.insert(row, Point(x, y))
        return row

    def as_array(self) -> np.ndarray:
        if not self.data:
            return np.empty((0, 2), dtype=float)
        return np.asarray(self.data, dtype=float)


def _require_finite(x: float, y: float) -> Tuple[float, float]:
    x = float(x)
    y = float(y)
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InputValidationError(f"Point ({x}, {y}) is not finite.")
    return x, y


class SeriesStore:
    """
    Ordered collection of named series plus the index of the active one.

    The store is never empty: constructing it without series creates the
    default series so there is always something to select.
    """

    def __init__(self, series: Optional[List[DataSeries]] = None, *, default_name: str = DEFAULT_SERIES_NAME) -> None:
        self.series: List[DataSeries] = list(series or [])
        if not self.series:
            self.series.append(DataSeries(default_name))
        self.selected_index = 0

    def __len__(self) -> int:
        return len(self.series)

    @property
    def active(self) -> DataSeries:
        return self.series[self.selected_index]

    def series_names(self) -> List[str]:
        return [s.name for s in self.series]

    def _get(self, series_index: int) -> DataSeries:
        if not 0 <= series_index < len(self.series):
            raise IndexOutOfRange(f"No series at index {series_index}.")
        return self.series[series_index]

    def insert_point(self, series_index: int, x: float, y: float) -> int:
        s = self._get(series_index)
        x, y = _require_finite(x, y)
        return s.insert(x, y)

    def delete_point(self, series_index: int, row_index: int) -> Point:
        s = self._get(series_index)
        if not 0 <= row_index < len(s.data):
            raise IndexOutOfRange(f"No point at row {row_index} in '{s.name}'.")
        return s.data.pop(row_index)

    def bounds(self, series_index: int) -> Tuple[float, float]:
        """(max_x, max_y) over the series, or (1.0, 1.0) when it holds no points."""
        arr = self._get(series_index).as_array()
        if arr.size == 0:
            return EMPTY_BOUNDS
        mx = arr.max(axis=0)
        return float(mx[0]), float(mx[1])

    def extent(self, series_index: int) -> Tuple[float, float, float, float]:
        arr = self._get(series_index).as_array()
        if arr.size == 0:
            return EMPTY_EXTENT
        lo = arr.min(axis=0)
        max_x, max_y = self.bounds(series_index)
        return float(lo[0]), max_x, float(lo[1]), max_y

    def add_series(self, name: str = "") -> int:
        name = (name or "").strip() or f"Series {len(self.series) + 1}"
        self.series.append(DataSeries(name))
        self.selected_index = len(self.series) - 1
        logger.debug("Added series %r at index %d", name, self.selected_index)
        return self.selected_index

    def select(self, index: int) -> None:
        if not 0 <= index < len(self.series):
            raise IndexOutOfRange(f"No series at index {index}.")
        self.selected_index = index

    def select_next(self, step: int = 1) -> int:
        self.selected_index = (self.selected_index + step) % len(self.series)
        return self.selected_index

    def point_count(self) -> int:
        return sum(len(s.data) for s in self.series)
