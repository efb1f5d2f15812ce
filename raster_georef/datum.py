"""
Ellipsoid and datum description.

A Datum carries the ellipsoid geometry used to interpret geographic
coordinates plus the PROJ parameter string ("+datum=WGS84",
"+a=1737400 +b=1737400", ...) that is appended to the projection
specification when the projection engine is built.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pyproj import CRS

logger = logging.getLogger(__name__)

# Spheroid names that all designate the WGS84 reference ellipsoid
WGS84_SPHEROID_ALIASES = ("WGS_1984", "WGS84", "WGS 84")
WGS84_DATUM_TAG = "+datum=WGS84"


@dataclass
class Datum:
    """Geodetic datum: ellipsoid axes, names and PROJ parameters.

    Attributes:
        name: Datum name (e.g. "WGS_1984").
        spheroid_name: Reference ellipsoid name (e.g. "WGS 84").
        meridian_name: Prime meridian name.
        semi_major_axis: Equatorial radius in meters.
        semi_minor_axis: Polar radius in meters.
        meridian_offset: Prime meridian offset from Greenwich in degrees.
        proj_params: PROJ parameter string describing the datum.
    """

    name: str = "WGS_1984"
    spheroid_name: str = "WGS 84"
    meridian_name: str = "Greenwich"
    semi_major_axis: float = 6378137.0
    semi_minor_axis: float = 6356752.3142451793
    meridian_offset: float = 0.0
    proj_params: str = WGS84_DATUM_TAG

    @property
    def inverse_flattening(self) -> float:
        """Inverse flattening a / (a - b); infinite for a sphere."""
        if self.semi_major_axis == self.semi_minor_axis:
            return math.inf
        return self.semi_major_axis / (self.semi_major_axis - self.semi_minor_axis)

    @property
    def is_sphere(self) -> bool:
        return self.semi_major_axis == self.semi_minor_axis

    def copy(self) -> Datum:
        return replace(self)

    @classmethod
    def well_known(cls, name: str) -> Datum:
        """Build one of the standard datums.

        Args:
            name: One of WGS84, WGS72, NAD83, NAD27, D_MOON, D_MARS, MOLA
                (case-insensitive; "WGS_1984" and "WGS 84" are accepted too).

        Raises:
            ValueError: If the name is not a known datum.
        """
        key = name.strip().upper().replace(" ", "_")
        if key in ("WGS_1984", "WGS_84"):
            key = "WGS84"
        try:
            fields = _WELL_KNOWN_DATUMS[key]
        except KeyError:
            raise ValueError(
                f"Unknown datum '{name}'. "
                f"Must be one of: {', '.join(_WELL_KNOWN_DATUMS)}"
            ) from None
        return cls(**fields)

    @classmethod
    def from_axes(
        cls,
        name: str,
        spheroid_name: str,
        meridian_name: str,
        semi_major_axis: float,
        semi_minor_axis: float,
        meridian_offset: float = 0.0,
    ) -> Datum:
        """Build a custom datum from its ellipsoid axes."""
        if semi_major_axis <= 0 or semi_minor_axis <= 0:
            raise ValueError(
                f"Ellipsoid axes must be positive, got a={semi_major_axis}, b={semi_minor_axis}"
            )
        params = f"+a={semi_major_axis!r} +b={semi_minor_axis!r}"
        if meridian_offset:
            params += f" +pm={meridian_offset!r}"
        return cls(
            name=name,
            spheroid_name=spheroid_name,
            meridian_name=meridian_name,
            semi_major_axis=float(semi_major_axis),
            semi_minor_axis=float(semi_minor_axis),
            meridian_offset=float(meridian_offset),
            proj_params=params,
        )

    @classmethod
    def from_crs(cls, crs: CRS) -> Datum:
        """Build a datum from the geodetic part of a pyproj CRS.

        The parameter string is derived from the ellipsoid axes; callers that
        know better PROJ tags (e.g. "+datum=WGS84") replace it afterwards.
        """
        ellipsoid = crs.ellipsoid
        if ellipsoid is None:
            raise ValueError(f"CRS '{crs.name}' has no ellipsoid")
        meridian = crs.prime_meridian
        datum = crs.datum
        return cls.from_axes(
            name=datum.name if datum is not None else "unknown",
            spheroid_name=ellipsoid.name,
            meridian_name=meridian.name if meridian is not None else "Greenwich",
            semi_major_axis=ellipsoid.semi_major_metre,
            semi_minor_axis=ellipsoid.semi_minor_metre,
            meridian_offset=meridian.longitude if meridian is not None else 0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Datum:
        """Build a datum from a mapping produced by to_dict().

        Raises:
            ValueError: If a key is not a Datum field.
        """
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown datum fields: {', '.join(sorted(unknown))}")
        return cls(**data)

    def __str__(self) -> str:
        return (
            f"Datum: {self.name}  Spheroid: {self.spheroid_name}  "
            f"Semi-major: {self.semi_major_axis}  Semi-minor: {self.semi_minor_axis}  "
            f"Meridian: {self.meridian_name} at {self.meridian_offset}  "
            f"PROJ: {self.proj_params}"
        )


def repair_wgs84_datum(datum: Datum) -> Datum:
    """
    Return a copy of a datum with a missing WGS84 datum tag restored.

    Exchange-format imports sometimes describe the WGS84 ellipsoid without
    naming the datum (e.g. '+proj=longlat +ellps=WGS84 +no_defs'). When the
    spheroid is one of the WGS84 aliases and the parameter string lacks a
    '+datum=' tag (or the datum is named 'unknown'), the datum is renamed
    WGS_1984 and ' +datum=WGS84' is appended.

    Args:
        datum: Datum to inspect. It is not modified.

    Returns:
        A new Datum, repaired if needed.
    """
    repaired = datum.copy()
    if repaired.spheroid_name not in WGS84_SPHEROID_ALIASES:
        return repaired
    if "+datum=" in repaired.proj_params and repaired.name != "unknown":
        return repaired

    repaired.name = "WGS_1984"
    if WGS84_DATUM_TAG not in repaired.proj_params:
        repaired.proj_params = f"{repaired.proj_params} {WGS84_DATUM_TAG}".strip()
    logger.debug(f"Repaired WGS84 datum tag: '{repaired.proj_params}'")
    return repaired


_WELL_KNOWN_DATUMS: dict[str, dict[str, Any]] = {
    "WGS84": dict(
        name="WGS_1984", spheroid_name="WGS 84", meridian_name="Greenwich",
        semi_major_axis=6378137.0, semi_minor_axis=6356752.3142451793,
        meridian_offset=0.0, proj_params="+datum=WGS84",
    ),
    "WGS72": dict(
        name="WGS_1972", spheroid_name="WGS 72", meridian_name="Greenwich",
        semi_major_axis=6378135.0, semi_minor_axis=6356750.520016094,
        meridian_offset=0.0, proj_params="+ellps=WGS72",
    ),
    "NAD83": dict(
        name="North_American_Datum_1983", spheroid_name="GRS 1980",
        meridian_name="Greenwich", semi_major_axis=6378137.0,
        semi_minor_axis=6356752.314140356, meridian_offset=0.0,
        proj_params="+datum=NAD83",
    ),
    "NAD27": dict(
        name="North_American_Datum_1927", spheroid_name="Clarke 1866",
        meridian_name="Greenwich", semi_major_axis=6378206.4,
        semi_minor_axis=6356583.8, meridian_offset=0.0,
        proj_params="+datum=NAD27",
    ),
    "D_MOON": dict(
        name="D_MOON", spheroid_name="MOON", meridian_name="Reference Meridian",
        semi_major_axis=1737400.0, semi_minor_axis=1737400.0,
        meridian_offset=0.0, proj_params="+a=1737400 +b=1737400",
    ),
    "D_MARS": dict(
        name="D_MARS", spheroid_name="MARS", meridian_name="Reference Meridian",
        semi_major_axis=3396190.0, semi_minor_axis=3396190.0,
        meridian_offset=0.0, proj_params="+a=3396190 +b=3396190",
    ),
    "MOLA": dict(
        name="D_MARS", spheroid_name="MOLA", meridian_name="Reference Meridian",
        semi_major_axis=3396000.0, semi_minor_axis=3396000.0,
        meridian_offset=0.0, proj_params="+a=3396000 +b=3396000",
    ),
}
