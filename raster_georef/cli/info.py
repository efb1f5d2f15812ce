"""Georeference inspection command."""

from pathlib import Path

import numpy as np
import typer

from raster_georef.affine_transform import matrix_to_geotransform
from raster_georef.cli.common import USER_ERRORS, OutputFormat, emit, fail, load_georeference
from raster_georef.cli.main import app
from raster_georef.wkt import get_wkt


@app.command("info")
def info_command(
    source: Path = typer.Argument(..., help="Georeference YAML config or georeferenced image"),
    wkt: bool = typer.Option(False, "--wkt", help="Include the WKT description"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.HUMAN,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """
    Show the georeference of a config file or image.

    Example:
        georef info scene.tif
        georef info config.yaml --format json --wkt
    """
    try:
        georef = load_georeference(source)
        wkt_text = get_wkt(georef) if wkt else None
    except USER_ERRORS as e:
        fail(str(e))

    data = {
        "source": str(source),
        "proj4": georef.proj4_str,
        "overall_proj4": georef.overall_proj4_str,
        "is_projected": georef.is_projected,
        "center_on_zero": georef.center_on_zero,
        "pixel_interpretation": georef.pixel_interpretation.value,
        "transform": georef.transform.tolist(),
        "datum": georef.datum.to_dict(),
    }
    # Same 6-tuple the config accepts; projective transforms have none
    transform = georef.transform
    if np.allclose(transform[2], [0.0, 0.0, 1.0]):
        data["geotransform"] = list(matrix_to_geotransform(transform))
    human = str(georef).rstrip()
    if wkt_text is not None:
        data["wkt"] = wkt_text
        human += f"\n\tWKT: {wkt_text}"
    emit(data, output_format, human)
