#!/usr/bin/env python3
"""
Georeference of a raster image.

A GeoReference relates three coordinate spaces:

    pixel (col, row)  --affine-->  projected plane (x, y)  --PROJ-->  (lon, lat)

It owns the affine transform (and its area-convention variant), the projection
specification, the datum and one projection engine binding. Every setter
recomputes all derived state, including the longitude range used to report
longitudes, before returning.

Setters are transactional: derived state is built into temporaries and only
committed when every step succeeds, so a setter that raises leaves the
instance exactly as it was.

Thread safety:
    Query methods only read committed state and may run concurrently once
    setup is complete. Setters must be serialized by the caller and never
    interleaved with queries on the same instance.

Example:
    >>> georef = GeoReference()
    >>> georef.set_utm(33, north=True)
    >>> georef.set_transform([[30.0, 0.0, 400000.0],
    ...                       [0.0, -30.0, 5000000.0],
    ...                       [0.0, 0.0, 1.0]])
    >>> lon, lat = georef.pixel_to_lonlat((100, 200))
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from raster_georef.affine_transform import AffineTransformManager, PixelInterpretation
from raster_georef.bbox import BoundingBox
from raster_georef.bbox_reprojector import (
    DEFAULT_NSAMPLES,
    corner_samples,
    grow_from_samples,
    lattice_samples,
    pixel_perimeter_samples,
)
from raster_georef.centering import decide_longitude_center
from raster_georef.datum import Datum, repair_wgs84_datum
from raster_georef.exceptions import InvalidSpecificationError
from raster_georef.longitude import normalize_longitude
from raster_georef.projection_engine import ProjectionEngineBinding
from raster_georef.projection_spec import ProjectionSpecification
from raster_georef.types import LonLat, Pixel, Point

logger = logging.getLogger(__name__)

GEOGRAPHIC_SPECIFICATION = "+proj=longlat"

# PROJ's internal latitude limit, just inside +-pi/2
LATITUDE_BOUND_RAD = math.pi / 2 - 1e-10 - np.finfo(float).eps


def _fmt(value: float) -> str:
    """Format a number for a PROJ string without losing precision."""
    return repr(float(value))


def utm_specification(zone: int, north: bool = True) -> str:
    """
    PROJ specification text of a UTM zone.

    Raises:
        InvalidSpecificationError: If zone is outside 1..60.
    """
    if not 1 <= int(zone) <= 60:
        raise InvalidSpecificationError(f"UTM zone must be in 1..60, got {zone}")
    text = f"+proj=utm +zone={int(zone)}"
    if not north:
        text += " +south"
    return text + " +units=m"


class GeoReference:
    """
    Pixel / projected-plane / lon-lat georeference of one raster.

    Attributes (read-only properties):
        pixel_interpretation: Pixel registration convention.
        transform: Stored 3x3 pixel-to-point transform (point convention).
        datum: Copy of the owned datum.
        proj4_str: Canonical projection specification text.
        is_projected: False for plain longitude/latitude georeferences.
        center_on_zero: True if longitudes are reported in [-180, 180),
            False for [0, 360).
    """

    def __init__(
        self,
        datum: Optional[Datum] = None,
        transform=None,
        pixel_interpretation: PixelInterpretation = PixelInterpretation.PIXEL_AS_AREA,
    ):
        """
        Create a geographic (unprojected) georeference.

        Args:
            datum: Datum to own a copy of (default WGS84).
            transform: 3x3 pixel-to-point transform (default identity).
            pixel_interpretation: Pixel registration convention.

        Raises:
            TransformSingularityError: If the transform is singular.
            ProjectionEngineError: If the engine cannot be built for the datum.
        """
        self._pixel_interpretation = PixelInterpretation(pixel_interpretation)
        self._datum = repair_wgs84_datum(datum if datum is not None else Datum())
        self._transforms = AffineTransformManager(transform)
        self._spec: Optional[ProjectionSpecification] = None
        self._binding: Optional[ProjectionEngineBinding] = None
        self._center_on_zero = True
        self.set_projection_specification(GEOGRAPHIC_SPECIFICATION)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def pixel_interpretation(self) -> PixelInterpretation:
        return self._pixel_interpretation

    @property
    def transform(self) -> np.ndarray:
        return self._transforms.transform

    @property
    def shifted_transform(self) -> np.ndarray:
        return self._transforms.shifted_transform

    @property
    def datum(self) -> Datum:
        return self._datum.copy()

    @property
    def projection_specification(self) -> ProjectionSpecification:
        return self._spec

    @property
    def proj4_str(self) -> str:
        return self._spec.text

    @property
    def overall_proj4_str(self) -> str:
        """Full engine definition: specification, datum parameters, '+no_defs'."""
        return self._engine_definition(self._spec, self._datum)

    @property
    def is_projected(self) -> bool:
        return not self._spec.is_geographic

    @property
    def center_on_zero(self) -> bool:
        return self._center_on_zero

    # =========================================================================
    # Setters
    # =========================================================================

    def set_transform(self, transform) -> None:
        """
        Replace the pixel-to-point transform (point convention).

        Raises:
            ValueError: If the matrix is not a finite 3x3 matrix.
            TransformSingularityError: If it cannot be inverted.
        """
        transforms = AffineTransformManager(transform)
        self._commit(self._spec, self._datum, transforms, self._pixel_interpretation)

    def set_pixel_interpretation(self, pixel_interpretation: PixelInterpretation) -> None:
        """Change the pixel registration convention."""
        self._commit(self._spec, self._datum, self._transforms,
                     PixelInterpretation(pixel_interpretation))

    def set_projection_specification(self, text: str) -> None:
        """
        Set the projection from PROJ specification text.

        The extended-range token is added unless present or the projection is
        UTM, then the engine is rebuilt and the longitude range re-decided.

        Raises:
            InvalidSpecificationError: If the text is malformed.
            ProjectionEngineError: If the engine rejects the specification.
        """
        spec = ProjectionSpecification.parse(text.strip())
        self._commit(spec, self._datum, self._transforms, self._pixel_interpretation)
        logger.info(f"Projection set to '{self._spec.text}'")

    def set_datum(self, datum: Datum) -> None:
        """
        Replace the datum with a (repaired) copy and rebuild the engine.

        Raises:
            ProjectionEngineError: If the engine rejects the datum parameters.
        """
        repaired = repair_wgs84_datum(datum)
        self._commit(self._spec, repaired, self._transforms, self._pixel_interpretation)
        logger.info(f"Datum set to {self._datum.name} ('{self._datum.proj_params}')")

    def set_datum_and_projection(self, datum: Datum, text: str) -> None:
        """Replace datum and projection together, as one transaction."""
        spec = ProjectionSpecification.parse(text.strip())
        self._commit(spec, repair_wgs84_datum(datum), self._transforms, self._pixel_interpretation)
        logger.info(f"Datum set to {self._datum.name}, projection set to '{self._spec.text}'")

    def set_well_known_geogcs(self, name: str) -> None:
        """Set one of the well-known datums by name (WGS84, NAD83, D_MOON, ...)."""
        self.set_datum(Datum.well_known(name))

    def set_lon_center(self, center_on_zero: bool) -> None:
        """Override the longitude range. Ignored for UTM projections."""
        if not self._spec.is_utm:
            self._center_on_zero = bool(center_on_zero)

    def _commit(self, spec, datum, transforms, pixel_interpretation) -> None:
        """
        Build the engine and decide the longitude range for candidate state,
        then adopt it. Nothing is assigned until every step has succeeded.
        """
        # Extended range is re-requested on every change; centering may drop it
        if not spec.is_utm:
            spec = spec.with_extended_range(True)
        binding = ProjectionEngineBinding(self._engine_definition(spec, datum))

        def probe() -> float:
            point = transforms.pixel_to_point((0.0, 0.0), pixel_interpretation)
            return self._unproject(point, spec, binding)[0]

        decision = decide_longitude_center(spec, probe, transforms.x_scale)
        if decision.clear_extended_range and spec.extended_range:
            spec = spec.with_extended_range(False)
            binding = ProjectionEngineBinding(self._engine_definition(spec, datum))

        self._spec = spec
        self._datum = datum
        self._transforms = transforms
        self._binding = binding
        self._pixel_interpretation = pixel_interpretation
        self._center_on_zero = decision.center_on_zero

    @staticmethod
    def _engine_definition(spec: ProjectionSpecification, datum: Datum) -> str:
        return f"{spec.text} {datum.proj_params.strip()} +no_defs"

    # =========================================================================
    # Named projections
    # =========================================================================

    def set_geographic(self) -> None:
        self.set_projection_specification(GEOGRAPHIC_SPECIFICATION)

    def set_equirectangular(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                            latitude_of_true_scale: float = 0.0,
                            false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=eqc +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+lat_ts={_fmt(latitude_of_true_scale)} +x_0={_fmt(false_easting)} "
            f"+y_0={_fmt(false_northing)} +units=m"
        )

    def set_sinusoidal(self, center_longitude: float = 0.0,
                       false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=sinu +lon_0={_fmt(center_longitude)} +x_0={_fmt(false_easting)} "
            f"+y_0={_fmt(false_northing)} +units=m"
        )

    def set_mercator(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                     latitude_of_true_scale: float = 0.0,
                     false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=merc +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+lat_ts={_fmt(latitude_of_true_scale)} +x_0={_fmt(false_easting)} "
            f"+y_0={_fmt(false_northing)} +units=m"
        )

    def set_transverse_mercator(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                                scale: float = 1.0,
                                false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=tmerc +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+k={_fmt(scale)} +x_0={_fmt(false_easting)} +y_0={_fmt(false_northing)} +units=m"
        )

    def set_orthographic(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                         false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=ortho +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+x_0={_fmt(false_easting)} +y_0={_fmt(false_northing)} +units=m"
        )

    def set_stereographic(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                          scale: float = 1.0,
                          false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=stere +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+k={_fmt(scale)} +x_0={_fmt(false_easting)} +y_0={_fmt(false_northing)} +units=m"
        )

    def set_oblique_stereographic(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                                  scale: float = 1.0,
                                  false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=sterea +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+k={_fmt(scale)} +x_0={_fmt(false_easting)} +y_0={_fmt(false_northing)} +units=m"
        )

    def set_gnomonic(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                     scale: float = 1.0,
                     false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=gnom +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+k={_fmt(scale)} +x_0={_fmt(false_easting)} +y_0={_fmt(false_northing)} +units=m"
        )

    def set_lambert_azimuthal(self, center_latitude: float = 0.0, center_longitude: float = 0.0,
                              false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=laea +lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+x_0={_fmt(false_easting)} +y_0={_fmt(false_northing)} +units=m"
        )

    def set_lambert_conformal(self, std_parallel_1: float, std_parallel_2: float,
                              center_latitude: float = 0.0, center_longitude: float = 0.0,
                              false_easting: float = 0.0, false_northing: float = 0.0) -> None:
        self.set_projection_specification(
            f"+proj=lcc +lat_1={_fmt(std_parallel_1)} +lat_2={_fmt(std_parallel_2)} "
            f"+lon_0={_fmt(center_longitude)} +lat_0={_fmt(center_latitude)} "
            f"+x_0={_fmt(false_easting)} +y_0={_fmt(false_northing)} +units=m"
        )

    def set_utm(self, zone: int, north: bool = True) -> None:
        """
        Set a Universal Transverse Mercator projection.

        Raises:
            InvalidSpecificationError: If zone is outside 1..60.
        """
        self.set_projection_specification(utm_specification(zone, north))

    # =========================================================================
    # Point conversions
    # =========================================================================

    def pixel_to_point(self, pixel: Pixel) -> Point:
        """Projected-plane position of a pixel.

        Raises:
            TransformSingularityError: On a near-zero homogeneous denominator.
        """
        return self._transforms.pixel_to_point(pixel, self._pixel_interpretation)

    def point_to_pixel(self, point: Point) -> Pixel:
        """Pixel position of a projected-plane point."""
        return self._transforms.point_to_pixel(point, self._pixel_interpretation)

    def point_to_lonlat(self, point: Point) -> LonLat:
        """
        Unproject a projected-plane point to (lon, lat) in degrees.

        The longitude is folded into this georeference's range.

        Raises:
            ProjectionEngineError: If the engine cannot unproject the point.
        """
        lon, lat = self.point_to_lonlat_no_normalize(point)
        return normalize_longitude(lon, self._center_on_zero), lat

    def point_to_lonlat_no_normalize(self, point: Point) -> LonLat:
        """Unproject without folding the longitude."""
        return self._unproject(point, self._spec, self._binding)

    @staticmethod
    def _unproject(point, spec: ProjectionSpecification, binding: ProjectionEngineBinding) -> LonLat:
        if spec.is_geographic:
            return float(point[0]), float(point[1])
        result = binding.inverse((float(point[0]), float(point[1])))
        if not result.ok:
            raise result.error
        lon_rad, lat_rad = result.value
        return math.degrees(lon_rad), math.degrees(lat_rad)

    def lonlat_to_point(self, lonlat: LonLat) -> Point:
        """
        Project (lon, lat) in degrees to the projected plane.

        The longitude is folded into this georeference's range first and the
        latitude clamped just inside the poles.

        Raises:
            ProjectionEngineError: If the engine cannot project the position.
        """
        lon = normalize_longitude(lonlat[0], self._center_on_zero)
        lat = float(lonlat[1])
        if not self.is_projected:
            return lon, lat

        lat_rad = min(max(math.radians(lat), -LATITUDE_BOUND_RAD), LATITUDE_BOUND_RAD)
        result = self._binding.forward((math.radians(lon), lat_rad))
        if not result.ok:
            raise result.error
        return result.value

    def pixel_to_lonlat(self, pixel: Pixel) -> LonLat:
        return self.point_to_lonlat(self.pixel_to_point(pixel))

    def lonlat_to_pixel(self, lonlat: LonLat) -> Pixel:
        return self.point_to_pixel(self.lonlat_to_point(lonlat))

    def pixel_reprojection_error(self, pixel: Pixel) -> float:
        """Distance in pixels between a pixel and its pixel->lonlat->pixel round trip."""
        out_x, out_y = self.lonlat_to_pixel(self.pixel_to_lonlat(pixel))
        return math.hypot(out_x - pixel[0], out_y - pixel[1])

    # =========================================================================
    # Bounding-box conversions
    # =========================================================================

    def pixel_to_point_bbox(self, pixel_bbox: BoundingBox) -> BoundingBox:
        """Projected-plane box enclosing a pixel box (its 4 corners)."""
        return grow_from_samples(corner_samples(pixel_bbox), self.pixel_to_point)

    def point_to_pixel_bbox(self, point_bbox: BoundingBox) -> BoundingBox:
        """Integer pixel box enclosing a projected-plane box."""
        return grow_from_samples(corner_samples(point_bbox), self.point_to_pixel).grow_to_int()

    def pixel_to_lonlat_bbox(self, pixel_bbox: BoundingBox) -> BoundingBox:
        """
        Lon/lat box enclosing a half-open pixel box.

        Samples every perimeter pixel plus both diagonals; pixels that do not
        unproject are skipped.
        """
        if not self.is_projected:
            return self.pixel_to_point_bbox(pixel_bbox)
        return grow_from_samples(pixel_perimeter_samples(pixel_bbox), self.pixel_to_lonlat)

    def lonlat_to_pixel_bbox(self, lonlat_bbox: BoundingBox,
                             nsamples: int = DEFAULT_NSAMPLES) -> BoundingBox:
        """Integer pixel box enclosing a lon/lat box."""
        if not self.is_projected:
            return self.point_to_pixel_bbox(lonlat_bbox)
        return self.point_to_pixel_bbox(self.lonlat_to_point_bbox(lonlat_bbox, nsamples))

    def lonlat_to_point_bbox(self, lonlat_bbox: BoundingBox,
                             nsamples: int = DEFAULT_NSAMPLES) -> BoundingBox:
        """Projected-plane box enclosing a lon/lat box, sampled on an nsamples lattice."""
        return grow_from_samples(lattice_samples(lonlat_bbox, nsamples), self.lonlat_to_point)

    def point_to_lonlat_bbox(self, point_bbox: BoundingBox,
                             nsamples: int = DEFAULT_NSAMPLES) -> BoundingBox:
        """Lon/lat box enclosing a projected-plane box, sampled on an nsamples lattice."""
        return grow_from_samples(lattice_samples(point_bbox, nsamples), self.point_to_lonlat)

    # =========================================================================
    # Copying and display
    # =========================================================================

    def copy(self) -> "GeoReference":
        """Return an independent copy with its own projection engine binding."""
        other = GeoReference.__new__(GeoReference)
        other._pixel_interpretation = self._pixel_interpretation
        other._datum = self._datum.copy()
        other._transforms = self._transforms.copy()
        other._spec = self._spec
        other._binding = self._binding.copy()
        other._center_on_zero = self._center_on_zero
        return other

    def __copy__(self) -> "GeoReference":
        return self.copy()

    def __deepcopy__(self, memo) -> "GeoReference":
        return self.copy()

    def __str__(self) -> str:
        lon_range = "[-180, 180)" if self._center_on_zero else "[0, 360)"
        interpretation = (
            "pixel as area"
            if self._pixel_interpretation is PixelInterpretation.PIXEL_AS_AREA
            else "pixel as point"
        )
        return (
            "-- PROJ Geospatial Reference Object --\n"
            f"\tTransform  : {np.array2string(self._transforms.transform, separator=', ')}\n"
            f"\t{self._datum}\n"
            f"\tPROJ String: {self._spec.text}\n"
            f"\tPixel Interpretation: {interpretation}\n"
            f"\tLongitude range: {lon_range}\n"
        )

    def __repr__(self) -> str:
        return (
            f"GeoReference(proj='{self._spec.text}', datum={self._datum.name}, "
            f"pixel_interpretation={self._pixel_interpretation.value})"
        )


__all__ = ["GeoReference", "PixelInterpretation", "GEOGRAPHIC_SPECIFICATION"]
