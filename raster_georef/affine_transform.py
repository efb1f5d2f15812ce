#!/usr/bin/env python3
"""
Affine pixel <-> projected-plane transforms.

The stored transform is a 3x3 homogeneous matrix mapping pixel (col, row) to
projected-plane (x, y), under the convention that pixel (0, 0) is the *point*
at the pixel's nominal sample location. Images registered with the *area*
convention, where (0, 0) is the upper-left corner of the upper-left cell, use
a derived transform shifted by half a pixel:

    shifted[0, 2] = T[0, 2] + 0.5 * T[0, 0]
    shifted[1, 2] = T[1, 2] + 0.5 * T[1, 1]

GDAL's 6-parameter GeoTransform relates to the 3x3 matrix as:

    | GT[1]  GT[2]  GT[0] |
    | GT[4]  GT[5]  GT[3] |
    |   0      0      1   |

References:
    - GDAL GeoTransform: https://gdal.org/tutorials/geotransforms_tut.html
"""

import logging
from enum import Enum
from typing import Sequence, Tuple

import numpy as np

from raster_georef.exceptions import TransformSingularityError

logger = logging.getLogger(__name__)

# Smallest homogeneous denominator accepted when applying a transform
DENOMINATOR_EPSILON = 1e-12


class PixelInterpretation(Enum):
    """Pixel registration convention of an image."""

    PIXEL_AS_AREA = "area"
    """Pixel (0, 0) is the upper-left corner of the upper-left cell (GeoTIFF
    PixelIsArea, GDAL GeoTransform)."""

    PIXEL_AS_POINT = "point"
    """Pixel (0, 0) is the sample location of the upper-left cell (GeoTIFF
    PixelIsPoint, ESRI world files)."""


def apply_homogeneous(matrix: np.ndarray, coords: Sequence[float]) -> Tuple[float, float]:
    """
    Apply a 3x3 homogeneous matrix to a 2D coordinate.

    Args:
        matrix: 3x3 transform.
        coords: (u, v) input coordinate.

    Returns:
        (row0 . [u, v, 1], row1 . [u, v, 1]) / (row2 . [u, v, 1])

    Raises:
        TransformSingularityError: If the denominator is (near) zero.
    """
    h = np.array([coords[0], coords[1], 1.0], dtype=float)
    denom = float(matrix[2] @ h)
    if abs(denom) < DENOMINATOR_EPSILON:
        raise TransformSingularityError(
            f"Homogeneous denominator {denom:.3e} is too close to zero at {tuple(coords)}"
        )
    return float(matrix[0] @ h) / denom, float(matrix[1] @ h) / denom


def _invert(matrix: np.ndarray, label: str) -> np.ndarray:
    try:
        inverse = np.linalg.inv(matrix)
    except np.linalg.LinAlgError as e:
        raise TransformSingularityError(f"{label} transform is singular:\n{matrix}") from e
    if not np.all(np.isfinite(inverse)):
        raise TransformSingularityError(f"{label} transform has no finite inverse:\n{matrix}")
    return inverse


class AffineTransformManager:
    """
    Owns a pixel->point transform, its area-convention variant and both
    inverses, and keeps the four matrices consistent.
    """

    def __init__(self, transform=None):
        self._transform = np.eye(3)
        self._shifted = np.eye(3)
        self._inverse = np.eye(3)
        self._inverse_shifted = np.eye(3)
        if transform is not None:
            self.set_transform(transform)

    def set_transform(self, transform) -> None:
        """
        Store a new transform and recompute the derived matrices.

        Raises:
            ValueError: If the matrix is not 3x3 or holds non-finite values.
            TransformSingularityError: If the transform or its shifted variant
                cannot be inverted. The previous matrices are kept.
        """
        matrix = np.array(transform, dtype=float)
        if matrix.shape != (3, 3):
            raise ValueError(f"Transform must be 3x3, got shape {matrix.shape}")
        if not np.all(np.isfinite(matrix)):
            raise ValueError(f"Transform must contain only finite values:\n{matrix}")

        shifted = matrix.copy()
        shifted[0, 2] += 0.5 * matrix[0, 0]
        shifted[1, 2] += 0.5 * matrix[1, 1]
        inverse = _invert(matrix, "Pixel-to-point")
        inverse_shifted = _invert(shifted, "Area-convention")

        self._transform = matrix
        self._shifted = shifted
        self._inverse = inverse
        self._inverse_shifted = inverse_shifted
        logger.debug(f"Affine transform set, det={np.linalg.det(matrix):.3e}")

    @property
    def transform(self) -> np.ndarray:
        return self._transform.copy()

    @property
    def shifted_transform(self) -> np.ndarray:
        return self._shifted.copy()

    @property
    def inverse_transform(self) -> np.ndarray:
        return self._inverse.copy()

    @property
    def inverse_shifted_transform(self) -> np.ndarray:
        return self._inverse_shifted.copy()

    @property
    def x_scale(self) -> float:
        """Change of projected x per unit pixel column, T[0, 0]."""
        return float(self._transform[0, 0])

    def native_transform(self, interpretation: PixelInterpretation) -> np.ndarray:
        if interpretation is PixelInterpretation.PIXEL_AS_AREA:
            return self._shifted
        return self._transform

    def native_inverse_transform(self, interpretation: PixelInterpretation) -> np.ndarray:
        if interpretation is PixelInterpretation.PIXEL_AS_AREA:
            return self._inverse_shifted
        return self._inverse

    def pixel_to_point(self, pixel: Sequence[float],
                       interpretation: PixelInterpretation) -> Tuple[float, float]:
        return apply_homogeneous(self.native_transform(interpretation), pixel)

    def point_to_pixel(self, point: Sequence[float],
                       interpretation: PixelInterpretation) -> Tuple[float, float]:
        return apply_homogeneous(self.native_inverse_transform(interpretation), point)

    def copy(self) -> "AffineTransformManager":
        return AffineTransformManager(self._transform)


def geotransform_to_matrix(gt: Sequence[float]) -> np.ndarray:
    """
    Convert a GDAL 6-parameter geotransform to a 3x3 homogeneous matrix.

    Applied to [P, L, 1] the matrix gives [GT[0] + P*GT[1] + L*GT[2],
    GT[3] + P*GT[4] + L*GT[5], 1], so PIXEL_AS_POINT on this matrix evaluates
    the GDAL formula unchanged.
    """
    if len(gt) != 6:
        raise ValueError(f"geotransform must have exactly 6 elements, got {len(gt)}")
    return np.array([
        [gt[1], gt[2], gt[0]],
        [gt[4], gt[5], gt[3]],
        [0.0, 0.0, 1.0],
    ], dtype=float)


def matrix_to_geotransform(matrix) -> Tuple[float, float, float, float, float, float]:
    """Convert an affine 3x3 matrix back to a GDAL 6-parameter geotransform."""
    m = np.asarray(matrix, dtype=float)
    if m.shape != (3, 3):
        raise ValueError(f"Transform must be 3x3, got shape {m.shape}")
    if not np.allclose(m[2], [0.0, 0.0, 1.0]):
        raise ValueError(f"Transform is not affine (last row {m[2]}), no geotransform exists")
    return (
        float(m[0, 2]), float(m[0, 0]), float(m[0, 1]),
        float(m[1, 2]), float(m[1, 0]), float(m[1, 1]),
    )
