"""Axis-aligned bounding boxes and integer line walking.

A BBox can be *empty* (no point has been grown into it yet), which is
distinct from a degenerate box holding a single point. Reprojection results
built from zero successful samples are empty boxes.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

import numpy as np


@dataclass
class BoundingBox:
    """Axis-aligned box in pixel, projected-plane or lon/lat space.

    Attributes:
        xmin: Minimum x coordinate (column, easting or longitude).
        ymin: Minimum y coordinate (row, northing or latitude).
        xmax: Maximum x coordinate.
        ymax: Maximum y coordinate.
    """

    xmin: float = math.inf
    ymin: float = math.inf
    xmax: float = -math.inf
    ymax: float = -math.inf

    @classmethod
    def empty(cls) -> "BoundingBox":
        """Return a box that contains nothing."""
        return cls()

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> "BoundingBox":
        """Return the smallest box containing all points."""
        box = cls.empty()
        for point in points:
            box.grow(point)
        return box

    @property
    def is_empty(self) -> bool:
        """True if no point has ever been grown into the box."""
        return self.xmin > self.xmax or self.ymin > self.ymax

    @property
    def width(self) -> float:
        """Width of the box (0 for an empty box)."""
        return 0.0 if self.is_empty else self.xmax - self.xmin

    @property
    def height(self) -> float:
        """Height of the box (0 for an empty box)."""
        return 0.0 if self.is_empty else self.ymax - self.ymin

    @property
    def min(self) -> Tuple[float, float]:
        return (self.xmin, self.ymin)

    @property
    def max(self) -> Tuple[float, float]:
        return (self.xmax, self.ymax)

    def grow(self, point: Tuple[float, float]) -> "BoundingBox":
        """Expand the box in place to contain a point.

        Returns:
            self, to allow chaining.
        """
        x, y = float(point[0]), float(point[1])
        self.xmin = min(self.xmin, x)
        self.ymin = min(self.ymin, y)
        self.xmax = max(self.xmax, x)
        self.ymax = max(self.ymax, y)
        return self

    def grow_bbox(self, other: "BoundingBox") -> "BoundingBox":
        """Expand the box in place to contain another box."""
        if not other.is_empty:
            self.grow(other.min)
            self.grow(other.max)
        return self

    def grow_to_int(self) -> "BoundingBox":
        """Return a copy snapped outward to integer bounds.

        Minima are floored and maxima are ceiled, so the result always
        encloses the original box. An empty box stays empty.
        """
        if self.is_empty:
            return BoundingBox.empty()
        return BoundingBox(
            xmin=math.floor(self.xmin),
            ymin=math.floor(self.ymin),
            xmax=math.ceil(self.xmax),
            ymax=math.ceil(self.ymax),
        )

    def contains(self, point: Tuple[float, float]) -> bool:
        """Check if a point is within the box (bounds inclusive)."""
        x, y = point
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (xmin, ymin, xmax, ymax) tuple."""
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    def __repr__(self) -> str:
        if self.is_empty:
            return "BoundingBox(empty)"
        return (
            f"BoundingBox(xmin={self.xmin}, ymin={self.ymin}, "
            f"xmax={self.xmax}, ymax={self.ymax})"
        )


def bresenham_line(
    start: Tuple[int, int],
    stop: Tuple[int, int],
    include_end: bool = False,
) -> Iterator[Tuple[int, int]]:
    """
    Walk the integer lattice points of a line segment.

    Uses the classic Bresenham error accumulator, so every yielded point is
    within half a pixel of the true segment and consecutive points are
    8-connected.

    Args:
        start: First lattice point (x, y).
        stop: Last lattice point (x, y).
        include_end: If False (default) the walk stops before `stop`,
            matching half-open pixel ranges.

    Yields:
        (x, y) integer tuples from start towards stop.

    Example:
        >>> list(bresenham_line((0, 0), (3, 3)))
        [(0, 0), (1, 1), (2, 2)]
    """
    x0, y0 = int(start[0]), int(start[1])
    x1, y1 = int(stop[0]), int(stop[1])
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    x, y = x0, y0
    while (x, y) != (x1, y1):
        yield (x, y)
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy
    if include_end:
        yield (x1, y1)


def lattice_line(
    start: Tuple[int, int],
    stop: Tuple[int, int],
    step: Tuple[float, float],
    origin: Tuple[float, float],
) -> Iterator[Tuple[float, float]]:
    """Yield a Bresenham diagonal scaled onto a real-valued sampling lattice.

    Each lattice point (i, j) maps to origin + (i * step_x, j * step_y).
    Both end points are included.
    """
    step_arr = np.asarray(step, dtype=float)
    origin_arr = np.asarray(origin, dtype=float)
    for i, j in bresenham_line(start, stop, include_end=True):
        sample = origin_arr + np.array([i, j], dtype=float) * step_arr
        yield (float(sample[0]), float(sample[1]))
