"""
Well-Known Text import and export for GeoReference objects.

Import goes through pyproj: the CRS is parsed, its geodetic part becomes a
Datum and its PROJ string export is filtered down to the parameters a
projection specification carries. Export builds a pyproj CRS from the datum
and, when projected, the specification's conversion.
"""

import logging
import warnings
from typing import List, Tuple

from pyproj import CRS
from pyproj.crs import GeographicCRS, ProjectedCRS
from pyproj.crs.datum import CustomDatum, CustomEllipsoid, CustomPrimeMeridian
from pyproj.exceptions import CRSError

from raster_georef.datum import Datum
from raster_georef.exceptions import InvalidSpecificationError, UnsupportedOperationError
from raster_georef.georeference import GEOGRAPHIC_SPECIFICATION, GeoReference, utm_specification

logger = logging.getLogger(__name__)

# Token prefixes kept in the projection specification
PROJECTION_TOKEN_PREFIXES = (
    "+proj=", "+x_0=", "+y_0=", "+lon", "+lat", "+k=", "+lat_ts=",
    "+ns", "+no_cut", "+h=", "+W=", "+units=", "+zone=",
)

# Token prefixes forwarded into the datum parameter string. Explicit '+a='/'+b='
# axes are not forwarded; the Datum built from the CRS ellipsoid carries them,
# so a spherical CRS such as EPSG:3857 comes back on its named datum (WGS84,
# ellipsoidal).
DATUM_TOKEN_PREFIXES = ("+ellps=", "+datum=")

ILLEGAL_SCALE_TOKEN = "+k=0"

DEFAULT_WKT_VERSION = "WKT1_GDAL"


def split_proj_tokens(proj4: str) -> Tuple[List[str], List[str]]:
    """
    Split a PROJ string exported from a CRS into projection and datum tokens.

    Tokens that are neither are dropped. '+k=0' is not a valid scale and is
    dropped with a warning.

    Returns:
        (projection_tokens, datum_tokens)
    """
    projection_tokens = []
    datum_tokens = []
    for token in proj4.split():
        if token == ILLEGAL_SCALE_TOKEN:
            logger.warning(f"Ignoring illegal scale factor '{token}' in exported PROJ string")
        elif token.startswith(DATUM_TOKEN_PREFIXES):
            datum_tokens.append(token)
        elif token.startswith(PROJECTION_TOKEN_PREFIXES):
            projection_tokens.append(token)
    return projection_tokens, datum_tokens


def _parse_utm_zone(zone: str) -> Tuple[int, bool]:
    """'33N' -> (33, True), '19S' -> (19, False)."""
    zone = zone.strip().upper()
    digits = "".join(c for c in zone if c.isdigit())
    return int(digits), not zone.endswith("S")


def set_wkt(georef: GeoReference, wkt: str) -> None:
    """
    Set datum and projection of a georeference from a WKT string.

    A CRS that is a UTM zone is set with the UTM zone specification instead of
    its exported parameters. The affine transform is left unchanged.

    Args:
        georef: GeoReference to update. Unchanged if an error is raised.
        wkt: WKT (any version pyproj accepts).

    Raises:
        InvalidSpecificationError: If the WKT cannot be parsed or has no
            ellipsoid.
        ProjectionEngineError: If the engine rejects the result.
    """
    try:
        crs = CRS.from_wkt(wkt)
    except CRSError as e:
        raise InvalidSpecificationError(f"Cannot parse WKT: {e}") from e

    try:
        datum = Datum.from_crs(crs)
    except ValueError as e:
        raise InvalidSpecificationError(str(e)) from e

    with warnings.catch_warnings():
        # pyproj warns that PROJ strings are lossy
        warnings.simplefilter("ignore", UserWarning)
        proj4 = crs.to_proj4() or ""

    projection_tokens, datum_tokens = split_proj_tokens(proj4)
    if datum_tokens:
        datum.proj_params = " ".join(datum_tokens)

    utm_zone = crs.utm_zone
    if utm_zone:
        zone, north = _parse_utm_zone(utm_zone)
        text = utm_specification(zone, north)
    elif any(t.startswith("+proj=") for t in projection_tokens):
        text = " ".join(projection_tokens)
    else:
        text = GEOGRAPHIC_SPECIFICATION

    logger.debug(f"WKT '{crs.name}' -> '{text}' with datum '{datum.proj_params}'")
    georef.set_datum_and_projection(datum, text)


def get_wkt(georef: GeoReference, version: str = DEFAULT_WKT_VERSION) -> str:
    """
    Export the datum and projection of a georeference as WKT.

    Args:
        georef: GeoReference to describe.
        version: pyproj WKT version name (e.g. "WKT1_GDAL", "WKT2_2019").

    Raises:
        UnsupportedOperationError: If the projection cannot be expressed in
            the requested WKT version.
    """
    datum = georef.datum
    ellipsoid = CustomEllipsoid(
        name=datum.spheroid_name,
        semi_major_axis=datum.semi_major_axis,
        semi_minor_axis=datum.semi_minor_axis,
    )
    prime_meridian = CustomPrimeMeridian(
        name=datum.meridian_name,
        longitude=datum.meridian_offset,
    )
    geographic = GeographicCRS(
        name=f"Geographic Coordinate System ({datum.name})",
        datum=CustomDatum(name=datum.name, ellipsoid=ellipsoid, prime_meridian=prime_meridian),
    )

    try:
        if georef.is_projected:
            spec = georef.projection_specification
            conversion = CRS.from_proj4(
                f"{spec.projection_text} {datum.proj_params}"
            ).coordinate_operation
            crs = ProjectedCRS(
                conversion=conversion,
                name=f"{spec.family} ({datum.name})",
                geodetic_crs=geographic,
            )
        else:
            crs = geographic
        return crs.to_wkt(version=version)
    except CRSError as e:
        raise UnsupportedOperationError(
            f"Projection '{georef.proj4_str}' cannot be exported as {version}: {e}"
        ) from e
