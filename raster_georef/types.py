"""
Unit type annotations for georeferencing values.

This module defines NewType aliases for the units that flow between the three
coordinate spaces handled by raster_georef. They document which space a value
belongs to and let static type checkers catch mix-ups (e.g. passing degrees
where the projection engine expects radians) at zero runtime cost.

Usage Example:
    >>> from raster_georef.types import Degrees, LonLat
    >>>
    >>> def west_edge(lonlat: LonLat) -> Degrees:
    ...     return Degrees(lonlat[0])
"""

from typing import NewType, Tuple

# Angular units
Degrees = NewType('Degrees', float)
"""Angle in degrees (longitude, latitude, projection parameters)"""

Radians = NewType('Radians', float)
"""Angle in radians (what the projection engine consumes and produces)"""

# Coordinate pairs
Pixel = Tuple[float, float]
"""Pixel coordinate as (column, row)"""

Point = Tuple[float, float]
"""Projected-plane coordinate as (x, y)"""

LonLat = Tuple[float, float]
"""Geographic coordinate as (longitude, latitude) in degrees"""
