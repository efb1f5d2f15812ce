"""
Longitude folding helpers.

Longitude is circular, so every georeference commits to one of two canonical
ranges: centered on 0 ([-180, 180)) or centered on 180 ([0, 360)).
"""

import math

from raster_georef.types import Degrees


def normalize_longitude(lon: float, center_on_zero: bool) -> Degrees:
    """
    Fold a longitude into the canonical range of a georeference.

    Args:
        lon: Longitude in degrees, any finite value.
        center_on_zero: If True fold into [-180, 180), else into [0, 360).

    Returns:
        The folded longitude. Values already inside the target range are
        returned unchanged, which makes the fold idempotent.

    Examples:
        >>> normalize_longitude(190.0, True)
        -170.0
        >>> normalize_longitude(-10.0, False)
        350.0
        >>> normalize_longitude(-725.0, True)
        -5.0
    """
    if center_on_zero:
        if -180.0 <= lon < 180.0:
            return Degrees(lon)
    elif 0.0 <= lon < 360.0:
        return Degrees(lon)

    folded = lon % 360.0
    # Tiny negatives round up to exactly 360.0
    if folded >= 360.0:
        folded = 0.0
    if center_on_zero and folded >= 180.0:
        folded -= 360.0
    return Degrees(folded)


def degree_diff(a: float, b: float) -> Degrees:
    """
    Smallest circular distance between two angles in degrees.

    Args:
        a: First angle in degrees.
        b: Second angle in degrees.

    Returns:
        Distance in [0, 180].

    Examples:
        >>> degree_diff(170.0, -170.0)
        20.0
    """
    diff = math.fmod(abs(a - b), 360.0)
    return Degrees(min(diff, 360.0 - diff))
