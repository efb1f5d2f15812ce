"""CLI module for georeferencing tools.

Provides the `georef` command-line interface for inspecting georeferences and
converting coordinates and bounding boxes between image and world spaces.
"""

from raster_georef.cli.main import app

__all__ = ["app"]
