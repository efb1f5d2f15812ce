"""
Image-resource metadata hooks.

Georeferences and header strings are stored alongside images by different
backends. Each backend declares what it can do as a ResourceCapability set,
and the module-level hooks dispatch on that declaration:

    read_georeference(resource)           -> (GeoReference | None, found)
    write_georeference(resource, georef)
    read_header_string(resource, key)     -> str | None
    write_header_string(resource, key, value)

A backend without GEOREFERENCE_READ reports "not found"; the other hooks raise
UnsupportedOperationError for a missing capability.
"""

from __future__ import annotations

import logging
from enum import Flag, auto
from pathlib import Path
from typing import ClassVar, List, Optional, Protocol, Tuple, Type

from raster_georef.exceptions import UnsupportedOperationError
from raster_georef.georeference import GeoReference

logger = logging.getLogger(__name__)


class ResourceCapability(Flag):
    """Metadata operations a resource backend supports."""

    NONE = 0
    GEOREFERENCE_READ = auto()
    GEOREFERENCE_WRITE = auto()
    HEADER_READ = auto()
    HEADER_WRITE = auto()


class FileSystem(Protocol):
    """Protocol for file system operations."""

    def read_text(self, path: str | Path) -> str:
        """Read text from a file."""
        ...

    def write_text(self, path: str | Path, content: str) -> None:
        """Write text to a file."""
        ...

    def exists(self, path: str | Path) -> bool:
        """Whether a file exists."""
        ...


class DefaultFileSystem:
    """Default file system implementation."""

    def read_text(self, path: str | Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: str | Path, content: str) -> None:
        Path(path).write_text(content, encoding="utf-8")

    def exists(self, path: str | Path) -> bool:
        return Path(path).is_file()


def _get_fs(fs: FileSystem | None) -> FileSystem:
    """Return the provided filesystem or the default."""
    return fs if fs is not None else DefaultFileSystem()


class ImageResource:
    """Base class of image-resource backends.

    Subclasses set `capabilities` and `suffixes` (lower-case image suffixes
    the backend handles; empty means any) and override the hooks matching
    their capabilities.

    Attributes:
        path: Image path the metadata belongs to.
        fs: File system used for all reads and writes.
    """

    capabilities: ClassVar[ResourceCapability] = ResourceCapability.NONE
    suffixes: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, path: str | Path, fs: FileSystem | None = None):
        self.path = Path(path)
        self.fs = _get_fs(fs)

    def supports(self, capability: ResourceCapability) -> bool:
        return capability in self.capabilities

    @classmethod
    def handles(cls, path: Path, fs: FileSystem) -> bool:
        """Whether this backend finds metadata for the image at path."""
        return not cls.suffixes or path.suffix.lower() in cls.suffixes

    # Backends override only the hooks their capabilities declare, so these
    # are not abstract. The module-level functions check the flags first;
    # calling a hook the backend lacks raises UnsupportedOperationError.

    def load_georeference(self) -> Optional[GeoReference]:
        raise _unsupported(self, ResourceCapability.GEOREFERENCE_READ)

    def store_georeference(self, georef: GeoReference) -> None:
        raise _unsupported(self, ResourceCapability.GEOREFERENCE_WRITE)

    def load_header(self, key: str) -> Optional[str]:
        raise _unsupported(self, ResourceCapability.HEADER_READ)

    def store_header(self, key: str, value: str) -> None:
        raise _unsupported(self, ResourceCapability.HEADER_WRITE)

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.path}')"


def _unsupported(resource: ImageResource, capability: ResourceCapability) -> UnsupportedOperationError:
    return UnsupportedOperationError(
        f"{type(resource).__name__} does not support {capability.name} ({resource.path})"
    )


def read_georeference(resource: ImageResource) -> Tuple[Optional[GeoReference], bool]:
    """
    Read the georeference stored for an image.

    Returns:
        (georef, True) when one was read, (None, False) when the resource has
        none or cannot store one.
    """
    if not resource.supports(ResourceCapability.GEOREFERENCE_READ):
        logger.debug(f"{resource!r} cannot read georeferences")
        return None, False
    georef = resource.load_georeference()
    return georef, georef is not None


def write_georeference(resource: ImageResource, georef: GeoReference) -> None:
    """
    Raises:
        UnsupportedOperationError: If the backend cannot write georeferences.
    """
    if not resource.supports(ResourceCapability.GEOREFERENCE_WRITE):
        raise _unsupported(resource, ResourceCapability.GEOREFERENCE_WRITE)
    resource.store_georeference(georef)
    logger.info(f"Wrote georeference for {resource.path}")


def read_header_string(resource: ImageResource, key: str) -> Optional[str]:
    """
    Returns:
        The header value, or None if the key is not present.

    Raises:
        UnsupportedOperationError: If the backend has no header strings.
    """
    if not resource.supports(ResourceCapability.HEADER_READ):
        raise _unsupported(resource, ResourceCapability.HEADER_READ)
    return resource.load_header(key)


def write_header_string(resource: ImageResource, key: str, value: str) -> None:
    """
    Raises:
        UnsupportedOperationError: If the backend cannot write header strings.
    """
    if not resource.supports(ResourceCapability.HEADER_WRITE):
        raise _unsupported(resource, ResourceCapability.HEADER_WRITE)
    resource.store_header(key, str(value))


# Backends in lookup order
_BACKENDS: List[Type[ImageResource]] = []


def register_backend(cls: Type[ImageResource]) -> Type[ImageResource]:
    """Class decorator adding a backend to the open_resource lookup."""
    if cls not in _BACKENDS:
        _BACKENDS.append(cls)
    return cls


def registered_backends() -> List[Type[ImageResource]]:
    return list(_BACKENDS)


def open_resource(path: str | Path, fs: FileSystem | None = None,
                  default: Optional[Type[ImageResource]] = None) -> ImageResource:
    """
    Open the metadata of an image with the first backend that handles it.

    Args:
        path: Image path.
        fs: File system (default: DefaultFileSystem).
        default: Backend used when no registered backend has metadata for
            the image (default: the first registered backend).

    Raises:
        UnsupportedOperationError: If no backend is registered.
    """
    image_path = Path(path)
    file_system = _get_fs(fs)
    for backend in _BACKENDS:
        if backend.handles(image_path, file_system):
            logger.debug(f"Opening {image_path} with {backend.__name__}")
            return backend(image_path, file_system)

    fallback = default or (_BACKENDS[0] if _BACKENDS else None)
    if fallback is None:
        raise UnsupportedOperationError(f"No image resource backend registered for {image_path}")
    return fallback(image_path, file_system)
