"""Coordinate and bounding-box conversion commands."""

from enum import Enum
from pathlib import Path

import typer

from raster_georef.bbox import BoundingBox
from raster_georef.bbox_reprojector import DEFAULT_NSAMPLES
from raster_georef.cli.common import USER_ERRORS, OutputFormat, emit, fail, load_georeference
from raster_georef.cli.main import app


class BBoxConversion(str, Enum):
    """Source and target space of a bounding-box conversion."""

    PIXEL_TO_LONLAT = "pixel-to-lonlat"
    LONLAT_TO_PIXEL = "lonlat-to-pixel"
    PIXEL_TO_POINT = "pixel-to-point"
    POINT_TO_PIXEL = "point-to-pixel"
    LONLAT_TO_POINT = "lonlat-to-point"
    POINT_TO_LONLAT = "point-to-lonlat"


# Conversions that take a sample count
_SAMPLED = {
    BBoxConversion.LONLAT_TO_PIXEL,
    BBoxConversion.LONLAT_TO_POINT,
    BBoxConversion.POINT_TO_LONLAT,
}

_SOURCE_OPTION = typer.Argument(..., help="Georeference YAML config or georeferenced image")
_FORMAT_OPTION = typer.Option(OutputFormat.HUMAN, "--format", "-f", help="Output format")


@app.command("pixel-to-lonlat")
def pixel_to_lonlat_command(
    source: Path = _SOURCE_OPTION,
    x: float = typer.Option(..., "--x", help="Pixel column"),
    y: float = typer.Option(..., "--y", help="Pixel row"),
    output_format: OutputFormat = _FORMAT_OPTION,
) -> None:
    """
    Convert a pixel position to longitude/latitude in degrees.

    Example:
        georef pixel-to-lonlat scene.tif --x 100 --y 200
    """
    try:
        georef = load_georeference(source)
        lon, lat = georef.pixel_to_lonlat((x, y))
    except USER_ERRORS as e:
        fail(str(e))

    emit(
        {"pixel": [x, y], "lonlat": [lon, lat]},
        output_format,
        f"pixel ({x}, {y}) -> lon {lon:.9f}, lat {lat:.9f}",
    )


@app.command("lonlat-to-pixel")
def lonlat_to_pixel_command(
    source: Path = _SOURCE_OPTION,
    lon: float = typer.Option(..., "--lon", help="Longitude in degrees"),
    lat: float = typer.Option(..., "--lat", help="Latitude in degrees"),
    output_format: OutputFormat = _FORMAT_OPTION,
) -> None:
    """
    Convert longitude/latitude in degrees to a pixel position.

    Example:
        georef lonlat-to-pixel scene.tif --lon=-120.5 --lat 38.2
    """
    try:
        georef = load_georeference(source)
        px, py = georef.lonlat_to_pixel((lon, lat))
    except USER_ERRORS as e:
        fail(str(e))

    emit(
        {"lonlat": [lon, lat], "pixel": [px, py]},
        output_format,
        f"lon {lon}, lat {lat} -> pixel ({px:.4f}, {py:.4f})",
    )


@app.command("bbox")
def bbox_command(
    source: Path = _SOURCE_OPTION,
    conversion: BBoxConversion = typer.Option(
        BBoxConversion.PIXEL_TO_LONLAT, "--conversion", "-c", help="Source and target space"
    ),
    xmin: float = typer.Option(..., "--xmin"),
    ymin: float = typer.Option(..., "--ymin"),
    xmax: float = typer.Option(..., "--xmax"),
    ymax: float = typer.Option(..., "--ymax"),
    nsamples: int = typer.Option(
        DEFAULT_NSAMPLES, "--nsamples", "-n", min=1, help="Samples per edge for lon/lat conversions"
    ),
    output_format: OutputFormat = _FORMAT_OPTION,
) -> None:
    """
    Convert a bounding box between pixel, projected and lon/lat space.

    Example:
        georef bbox scene.tif --xmin 0 --ymin 0 --xmax 1024 --ymax 768
        georef bbox scene.tif -c lonlat-to-pixel --xmin=-121 --ymin 38 --xmax=-120 --ymax 39
    """
    box = BoundingBox(xmin, ymin, xmax, ymax)
    method = conversion.value.replace("-", "_") + "_bbox"
    try:
        georef = load_georeference(source)
        if conversion in _SAMPLED:
            result = getattr(georef, method)(box, nsamples)
        else:
            result = getattr(georef, method)(box)
    except USER_ERRORS as e:
        fail(str(e))

    data = {
        "conversion": conversion.value,
        "input": list(box.as_tuple()),
        "output": None if result.is_empty else list(result.as_tuple()),
    }
    human = f"{conversion.value}: {box!r} -> {result!r}"
    emit(data, output_format, human)
