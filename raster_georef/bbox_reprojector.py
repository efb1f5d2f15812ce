"""
Bounding-box reprojection by point sampling.

There is no closed-form way to bound a box pushed through a nonlinear,
possibly discontinuous or partially undefined mapping. Instead a finite set of
representative samples is transformed one by one and an enclosing box is grown
from the samples that succeed; a failing sample (point off the projection's
domain, pole singularity, ...) is dropped without aborting.

Sample sets:
    - corner_samples: the 4 corners, for locally affine mappings.
    - pixel_perimeter_samples: every integer pixel on the perimeter of a
      half-open pixel box plus its two diagonals. Diagonals catch poles and
      antimeridian crossings inside the box that the boundary never sees.
    - lattice_samples: `nsamples` intervals along each edge of a real-valued
      box plus the two diagonals of the nsamples x nsamples lattice.
"""

import logging
import math
from typing import Callable, Iterable, Iterator, Tuple

import numpy as np

from raster_georef.bbox import BoundingBox, bresenham_line, lattice_line
from raster_georef.exceptions import GeoReferenceError

logger = logging.getLogger(__name__)

# Errors that remove a single sample instead of failing the whole box
SAMPLE_ERRORS = (GeoReferenceError, ArithmeticError)

DEFAULT_NSAMPLES = 100

Converter = Callable[[Tuple[float, float]], Tuple[float, float]]


def grow_from_samples(samples: Iterable[Tuple[float, float]], convert: Converter) -> BoundingBox:
    """
    Grow a box from every sample that converts successfully.

    Args:
        samples: Input coordinates.
        convert: Mapping into the target space. May raise for some samples.

    Returns:
        Enclosing box of the converted samples; empty if none converted.
    """
    box = BoundingBox.empty()
    dropped = 0
    for sample in samples:
        try:
            box.grow(convert(sample))
        except SAMPLE_ERRORS:
            dropped += 1
    if dropped:
        logger.debug(f"Dropped {dropped} samples that failed to convert")
    return box


def corner_samples(box: BoundingBox) -> Iterator[Tuple[float, float]]:
    """Yield the four corners of a box."""
    if box.is_empty:
        return
    yield (box.xmin, box.ymin)
    yield (box.xmax, box.ymax)
    yield (box.xmin, box.ymax)
    yield (box.xmax, box.ymin)


def integer_pixel_bounds(box: BoundingBox) -> Tuple[int, int, int, int]:
    """Snap a pixel box outward to integer (xmin, ymin, xmax, ymax)."""
    return (
        int(math.floor(box.xmin)), int(math.floor(box.ymin)),
        int(math.ceil(box.xmax)), int(math.ceil(box.ymax)),
    )


def pixel_perimeter_samples(box: BoundingBox) -> Iterator[Tuple[int, int]]:
    """
    Yield the perimeter pixels and two diagonals of a half-open pixel box.

    The box covers columns xmin <= x < xmax and rows ymin <= y < ymax.
    """
    if box.is_empty:
        return
    xmin, ymin, xmax, ymax = integer_pixel_bounds(box)

    # Top and bottom rows
    for x in range(xmin, xmax):
        yield (x, ymin)
        yield (x, ymax - 1)
    # Left and right columns, corners already covered
    for y in range(ymin + 1, ymax - 1):
        yield (xmin, y)
        yield (xmax - 1, y)

    # An X through the box covers interior poles and terminators
    yield from bresenham_line((xmin, ymin), (xmax, ymax))
    yield from bresenham_line((xmax, ymin), (xmin, ymax))


def lattice_samples(box: BoundingBox, nsamples: int = DEFAULT_NSAMPLES) -> Iterator[Tuple[float, float]]:
    """
    Yield edge and diagonal samples of a real-valued box.

    Args:
        box: Box to sample.
        nsamples: Number of intervals per edge; each edge gets nsamples + 1
            evenly spaced points including both ends.

    Raises:
        ValueError: If nsamples < 1.
    """
    if nsamples < 1:
        raise ValueError(f"nsamples must be at least 1, got {nsamples}")
    if box.is_empty:
        return

    xs = np.linspace(box.xmin, box.xmax, nsamples + 1)
    ys = np.linspace(box.ymin, box.ymax, nsamples + 1)
    for x, y in zip(xs, ys):
        yield (float(x), box.ymin)
        yield (float(x), box.ymax)
        yield (box.xmin, float(y))
        yield (box.xmax, float(y))

    step = (box.width / nsamples, box.height / nsamples)
    yield from lattice_line((0, 0), (nsamples, nsamples), step, box.min)
    yield from lattice_line((nsamples, 0), (0, nsamples), step, box.min)
