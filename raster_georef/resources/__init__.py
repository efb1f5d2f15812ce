"""Image-resource backends for georeference and header metadata."""

from raster_georef.resources.base import (
    DefaultFileSystem,
    FileSystem,
    ImageResource,
    ResourceCapability,
    open_resource,
    read_georeference,
    read_header_string,
    register_backend,
    registered_backends,
    write_georeference,
    write_header_string,
)
from raster_georef.resources.sidecar import SidecarResource, sidecar_path
from raster_georef.resources.worldfile import WorldFileResource, parse_world_file, world_file_candidates

__all__ = [
    "DefaultFileSystem",
    "FileSystem",
    "ImageResource",
    "ResourceCapability",
    "SidecarResource",
    "WorldFileResource",
    "open_resource",
    "parse_world_file",
    "read_georeference",
    "read_header_string",
    "register_backend",
    "registered_backends",
    "sidecar_path",
    "world_file_candidates",
    "write_georeference",
    "write_header_string",
]
