"""
ESRI world files (read-only).

A world file holds six lines, A D B E C F, describing

    x = A * col + B * row + C
    y = D * col + E * row + F

where (C, F) is the center of the upper-left pixel, i.e. pixel-as-point
registration. The coordinate system comes from a `.prj` WKT file next to the
image; without one the image is taken to be geographic WGS84.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from raster_georef.affine_transform import PixelInterpretation
from raster_georef.georeference import GeoReference
from raster_georef.resources.base import FileSystem, ImageResource, ResourceCapability, register_backend
from raster_georef.wkt import set_wkt

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".tif", ".tiff", ".png", ".jpg", ".jpeg", ".gif", ".bmp")


def world_file_candidates(image_path: Path) -> List[Path]:
    """
    World file names for an image, in lookup order.

    'scene.tif' -> ['scene.tfw', 'scene.tifw', 'scene.wld']
    """
    ext = image_path.suffix.lstrip(".")
    names = []
    if len(ext) >= 2:
        names.append(f".{ext[0]}{ext[-1]}w")
    if ext:
        names.append(f".{ext}w")
    names.append(".wld")
    return [image_path.with_suffix(suffix) for suffix in names]


def parse_world_file(text: str) -> List[List[float]]:
    """
    Parse world file text into a 3x3 pixel-to-point transform.

    Raises:
        ValueError: If the text does not hold exactly six numbers.
    """
    fields = text.split()
    if len(fields) != 6:
        raise ValueError(f"World file must contain 6 values, got {len(fields)}")
    try:
        a, d, b, e, c, f = (float(v) for v in fields)
    except ValueError:
        raise ValueError(f"World file values must be numbers, got {fields}") from None
    return [[a, b, c], [d, e, f], [0.0, 0.0, 1.0]]


@register_backend
class WorldFileResource(ImageResource):
    """World file plus optional .prj; georeference reads only."""

    capabilities = ResourceCapability.GEOREFERENCE_READ
    suffixes = IMAGE_SUFFIXES

    @classmethod
    def handles(cls, path: Path, fs: FileSystem) -> bool:
        if not super().handles(path, fs):
            return False
        return any(fs.exists(candidate) for candidate in world_file_candidates(path))

    def _find_world_file(self) -> Optional[Path]:
        for candidate in world_file_candidates(self.path):
            if self.fs.exists(candidate):
                return candidate
        return None

    def load_georeference(self) -> Optional[GeoReference]:
        world_file = self._find_world_file()
        if world_file is None:
            return None

        georef = GeoReference(
            transform=parse_world_file(self.fs.read_text(world_file)),
            pixel_interpretation=PixelInterpretation.PIXEL_AS_POINT,
        )
        prj_path = self.path.with_suffix(".prj")
        if self.fs.exists(prj_path):
            set_wkt(georef, self.fs.read_text(prj_path))
        else:
            logger.warning(f"No {prj_path.name} next to {self.path.name}; assuming geographic WGS84")
        return georef
