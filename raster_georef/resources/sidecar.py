"""YAML sidecar files: `<image>.georef.yaml` next to the image."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from raster_georef.config import CONFIG_SECTION, GeoReferenceConfig
from raster_georef.georeference import GeoReference
from raster_georef.resources.base import FileSystem, ImageResource, ResourceCapability, register_backend

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".georef.yaml"
HEADER_SECTION = "header"


def sidecar_path(image_path: str | Path) -> Path:
    """'scene.tif' -> 'scene.tif.georef.yaml'."""
    image_path = Path(image_path)
    return image_path.with_name(image_path.name + SIDECAR_SUFFIX)


@register_backend
class SidecarResource(ImageResource):
    """
    Georeference and header strings kept in a YAML sidecar.

    Layout:

        georeference:   # GeoReferenceConfig mapping
          ...
        header:
          key: value
    """

    capabilities = (
        ResourceCapability.GEOREFERENCE_READ
        | ResourceCapability.GEOREFERENCE_WRITE
        | ResourceCapability.HEADER_READ
        | ResourceCapability.HEADER_WRITE
    )

    def __init__(self, path: str | Path, fs: FileSystem | None = None):
        super().__init__(path, fs)
        self.sidecar_path = sidecar_path(self.path)

    @classmethod
    def handles(cls, path: Path, fs: FileSystem) -> bool:
        return fs.exists(sidecar_path(path))

    def _load_document(self) -> Dict[str, Any]:
        if not self.fs.exists(self.sidecar_path):
            return {}
        try:
            data = yaml.safe_load(self.fs.read_text(self.sidecar_path))
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse sidecar {self.sidecar_path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Sidecar {self.sidecar_path} must hold a mapping, got {type(data)}")
        return data

    def _save_document(self, data: Dict[str, Any]) -> None:
        self.fs.write_text(
            self.sidecar_path,
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
        )

    def load_georeference(self) -> Optional[GeoReference]:
        section = self._load_document().get(CONFIG_SECTION)
        if section is None:
            return None
        return GeoReferenceConfig.from_dict(section).build()

    def store_georeference(self, georef: GeoReference) -> None:
        data = self._load_document()
        data[CONFIG_SECTION] = GeoReferenceConfig.from_georeference(georef).to_dict()
        self._save_document(data)

    def load_header(self, key: str) -> Optional[str]:
        header = self._load_document().get(HEADER_SECTION) or {}
        value = header.get(key)
        return None if value is None else str(value)

    def store_header(self, key: str, value: str) -> None:
        data = self._load_document()
        header = data.get(HEADER_SECTION) or {}
        header[key] = value
        data[HEADER_SECTION] = header
        self._save_document(data)
        logger.debug(f"Header '{key}' written to {self.sidecar_path}")
