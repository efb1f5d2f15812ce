"""Helpers shared by the CLI commands."""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, NoReturn

import typer
import yaml

from raster_georef.config import GeoReferenceConfig
from raster_georef.exceptions import GeoReferenceError
from raster_georef.georeference import GeoReference
from raster_georef.resources import open_resource, read_georeference
from raster_georef.resources.sidecar import SIDECAR_SUFFIX

CONFIG_SUFFIXES = (".yaml", ".yml")

# Errors reported to the user instead of a traceback
USER_ERRORS = (GeoReferenceError, ValueError, FileNotFoundError)


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"
    YAML = "yaml"


def fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def load_georeference(source: Path) -> GeoReference:
    """
    Load a georeference from a YAML config or from an image's metadata.

    A path ending in .yaml/.yml (including a sidecar passed directly) is read
    as a configuration file; anything else is treated as an image and opened
    with the registered resource backends.
    """
    if source.suffix.lower() in CONFIG_SUFFIXES or source.name.endswith(SIDECAR_SUFFIX):
        return GeoReferenceConfig.from_yaml(source).build()

    georef, found = read_georeference(open_resource(source))
    if not found:
        raise FileNotFoundError(f"No georeference found for {source}")
    return georef


def emit(data: Dict[str, Any], output_format: OutputFormat, human: str) -> None:
    """Print a result in the requested format."""
    if output_format == OutputFormat.JSON:
        output = json.dumps(data, indent=2)
    elif output_format == OutputFormat.YAML:
        output = yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip()
    else:
        output = human
    typer.echo(output)
