"""
Longitude centering policy.

Chooses, for one georeference, whether longitudes are canonicalized into
[-180, 180) (centered on 0) or [0, 360) (centered on 180). The chosen range
must hold the whole image footprint without an internal wrap, and it must be
decided before any normalized longitude can be produced, so the probe works on
raw (unfolded) engine output.

Decision procedure:
    1. UTM: center on 0. A UTM zone never approaches the antimeridian.
    2. Orthographic: pixel (0, 0) may lie off the visible disk, so use the
       projection's +lon_0 and pick whichever of 0 / 180 is circularly closer.
    3. Otherwise probe the raw longitude of pixel (0, 0):
         > 180      -> center on 180
         < 0        -> center on 0
         in [0,180] -> center on 180 if increasing columns increase projected
                       x (T[0, 0] > 0), else center on 0.

Every "center on 0" outcome also drops the extended-range flag, which is only
needed when longitudes run past 180.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from raster_georef.exceptions import GeoReferenceError
from raster_georef.longitude import degree_diff
from raster_georef.projection_spec import ProjectionSpecification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CenteringDecision:
    """Outcome of the centering policy.

    Attributes:
        center_on_zero: True for [-180, 180), False for [0, 360).
        clear_extended_range: Whether the extended-range flag must be dropped
            and the engine rebuilt.
        reason: Short human-readable explanation, for logging.
    """

    center_on_zero: bool
    clear_extended_range: bool
    reason: str


def _center_on_zero(reason: str) -> CenteringDecision:
    return CenteringDecision(center_on_zero=True, clear_extended_range=True, reason=reason)


def _center_on_180(reason: str) -> CenteringDecision:
    return CenteringDecision(center_on_zero=False, clear_extended_range=False, reason=reason)


def decide_longitude_center(
    spec: ProjectionSpecification,
    probe_origin_longitude: Callable[[], float],
    x_scale: float,
) -> CenteringDecision:
    """
    Decide the canonical longitude range for a georeference.

    Args:
        spec: Current projection specification.
        probe_origin_longitude: Returns the unnormalized longitude (degrees)
            of pixel (0, 0). May raise GeoReferenceError; a failed probe is
            treated as "center on 0".
        x_scale: Pixel-to-projected-x scale term T[0, 0] of the stored
            transform. Rotation terms are not considered.

    Returns:
        CenteringDecision describing the range and whether the
        extended-range flag must be cleared.
    """
    if spec.is_utm:
        decision = _center_on_zero("UTM projection")
    elif spec.is_orthographic:
        lon0 = spec.value("+lon_0") or 0.0
        if degree_diff(lon0, 180.0) < degree_diff(lon0, 0.0):
            decision = _center_on_180(f"orthographic lon_0={lon0} nearer 180")
        else:
            decision = _center_on_zero(f"orthographic lon_0={lon0} nearer 0")
    else:
        decision = _decide_from_probe(probe_origin_longitude, x_scale)

    logger.debug(
        f"Longitude centering for '{spec.projection_text}': "
        f"{'[-180, 180)' if decision.center_on_zero else '[0, 360)'} ({decision.reason})"
    )
    return decision


def _decide_from_probe(probe_origin_longitude: Callable[[], float], x_scale: float) -> CenteringDecision:
    try:
        start_lon = probe_origin_longitude()
    except GeoReferenceError as e:
        return _center_on_zero(f"pixel (0, 0) does not unproject: {e}")

    if start_lon > 180.0:
        return _center_on_180(f"pixel (0, 0) at lon {start_lon} > 180")
    if start_lon < 0.0:
        return _center_on_zero(f"pixel (0, 0) at lon {start_lon} < 0")

    # Shared zone [0, 180]: leave room for the image to grow with pixel index
    if x_scale > 0:
        return _center_on_180(f"pixel (0, 0) at lon {start_lon}, x increasing")
    return _center_on_zero(f"pixel (0, 0) at lon {start_lon}, x decreasing")
