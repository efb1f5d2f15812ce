"""
Raster Georeferencing Package.

This package relates the pixels of a raster image to positions on a planetary
body. A GeoReference composes three coordinate spaces:

    - Pixel: (column, row) in the image
    - Projected plane: (x, y) in the units of a map projection
    - Geographic: (longitude, latitude) in degrees on a datum

Pixel and projected plane are related by a 3x3 affine transform; projected
plane and geographic coordinates by a PROJ projection (through pyproj).
Longitudes are always reported in one canonical range, [-180, 180) or
[0, 360), chosen per georeference so that an image straddling the
antimeridian keeps a continuous longitude range.

Example Usage:
    >>> from raster_georef import GeoReference, BoundingBox
    >>>
    >>> georef = GeoReference()
    >>> georef.set_utm(33, north=True)
    >>> georef.set_transform([[30.0, 0.0, 400000.0],
    ...                       [0.0, -30.0, 5000000.0],
    ...                       [0.0, 0.0, 1.0]])
    >>>
    >>> lon, lat = georef.pixel_to_lonlat((512, 384))
    >>> footprint = georef.pixel_to_lonlat_bbox(BoundingBox(0, 0, 1024, 768))

Available Classes:
    Core:
        - GeoReference: Pixel / projected / lon-lat conversions and bboxes
        - Datum: Ellipsoid and datum description
        - BoundingBox: Axis-aligned box used by all bbox conversions
        - PixelInterpretation: Pixel-as-area or pixel-as-point registration

    Building blocks:
        - AffineTransformManager: Transform, area variant and inverses
        - ProjectionSpecification: Parsed PROJ specification text
        - ProjectionEngineBinding: One pyproj operation, value-or-error calls

    Persistence:
        - GeoReferenceConfig: YAML configuration
        - set_wkt / get_wkt: Well-Known Text import and export
        - raster_georef.resources: sidecar and world-file backends
"""

# Core
from raster_georef.affine_transform import (
    AffineTransformManager,
    PixelInterpretation,
    geotransform_to_matrix,
    matrix_to_geotransform,
)
from raster_georef.bbox import BoundingBox
from raster_georef.datum import Datum
from raster_georef.georeference import GeoReference

# Building blocks
from raster_georef.exceptions import (
    GeoReferenceError,
    InvalidSpecificationError,
    ProjectionEngineError,
    TransformSingularityError,
    UnsupportedOperationError,
)
from raster_georef.longitude import degree_diff, normalize_longitude
from raster_georef.projection_engine import ProjectionEngineBinding, ProjectionResult
from raster_georef.projection_spec import ProjectionSpecification, extract_proj_value

# Persistence
from raster_georef.config import GeoReferenceConfig, get_default_config
from raster_georef.wkt import get_wkt, set_wkt

# Define public API
__all__ = [
    # Core
    'GeoReference',
    'Datum',
    'BoundingBox',
    'PixelInterpretation',
    'AffineTransformManager',

    # Errors
    'GeoReferenceError',
    'InvalidSpecificationError',
    'ProjectionEngineError',
    'TransformSingularityError',
    'UnsupportedOperationError',

    # Building blocks
    'ProjectionEngineBinding',
    'ProjectionResult',
    'ProjectionSpecification',
    'extract_proj_value',
    'normalize_longitude',
    'degree_diff',
    'geotransform_to_matrix',
    'matrix_to_geotransform',

    # Persistence
    'GeoReferenceConfig',
    'get_default_config',
    'get_wkt',
    'set_wkt',
]

# Package metadata
__version__ = '0.1.0'
__description__ = 'Affine and map-projection georeferencing of raster images'
