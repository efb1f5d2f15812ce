"""
Binding to the PROJ projection engine.

A ProjectionEngineBinding owns exactly one pyproj operation built from a PROJ
definition string (projection specification + datum parameters + '+no_defs').
The definition is used as a single-step operation, not as a CRS, so engine
flags such as '+over' reach PROJ untouched. Coordinates go in and out in
radians, mirroring PROJ's native forward/inverse calls.

Engine calls never raise: forward() and inverse() return a ProjectionResult
that the caller checks explicitly.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from pyproj import Transformer
from pyproj.enums import TransformDirection
from pyproj.exceptions import ProjError

from raster_georef.exceptions import ProjectionEngineError
from raster_georef.types import Point, Radians

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionResult:
    """Outcome of one engine call: a coordinate pair or an error.

    Attributes:
        value: Converted (x, y) pair, or None on failure.
        error: The failure, or None on success.
    """

    value: Optional[Tuple[float, float]] = None
    error: Optional[ProjectionEngineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Tuple[float, float]:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value


class ProjectionEngineBinding:
    """
    Exclusively owned PROJ operation for one projection definition.

    A binding constructed from an empty definition is left unconstructed;
    calls on it report an error instead of converting.

    Example:
        >>> binding = ProjectionEngineBinding("+proj=merc +over +datum=WGS84 +no_defs")
        >>> result = binding.forward((0.0, 0.5))
        >>> result.ok
        True
    """

    def __init__(self, definition: str):
        """
        Build the engine operation.

        Args:
            definition: Full PROJ definition string.

        Raises:
            ProjectionEngineError: If PROJ rejects the definition (unknown
                projection name or parameter).
        """
        self.definition = definition.strip()
        self._transformer: Optional[Transformer] = None
        if not self.definition:
            return

        try:
            self._transformer = Transformer.from_pipeline(self.definition)
        except ProjError as e:
            raise ProjectionEngineError(type(e).__name__, str(e), self.definition) from e
        logger.debug(f"Projection engine bound to '{self.definition}'")

    @property
    def is_initialized(self) -> bool:
        return self._transformer is not None

    def forward(self, lonlat_rad: Tuple[Radians, Radians]) -> ProjectionResult:
        """Project (lon, lat) in radians to projected-plane (x, y)."""
        return self._call(lonlat_rad, TransformDirection.FORWARD)

    def inverse(self, point: Point) -> ProjectionResult:
        """Unproject projected-plane (x, y) to (lon, lat) in radians."""
        return self._call(point, TransformDirection.INVERSE)

    def _call(self, coords: Tuple[float, float], direction: TransformDirection) -> ProjectionResult:
        if self._transformer is None:
            return ProjectionResult(error=ProjectionEngineError(
                "uninitialized", "projection engine has no definition", self.definition
            ))
        try:
            u, v = self._transformer.transform(
                coords[0], coords[1],
                radians=True,
                errcheck=True,
                direction=direction,
            )
        except ProjError as e:
            return ProjectionResult(error=ProjectionEngineError(
                type(e).__name__, str(e), self.definition
            ))

        if not (math.isfinite(u) and math.isfinite(v)):
            return ProjectionResult(error=ProjectionEngineError(
                "non-finite",
                f"{direction.name.lower()} conversion of {tuple(coords)} returned ({u}, {v})",
                self.definition,
            ))
        return ProjectionResult(value=(float(u), float(v)))

    def copy(self) -> "ProjectionEngineBinding":
        """Return an independent binding built from the same definition."""
        return ProjectionEngineBinding(self.definition)

    def __copy__(self) -> "ProjectionEngineBinding":
        return self.copy()

    def __deepcopy__(self, memo) -> "ProjectionEngineBinding":
        return self.copy()

    def __repr__(self) -> str:
        return f"ProjectionEngineBinding('{self.definition}')"
