"""
YAML configuration for building GeoReference objects.

Example file:

    georeference:
      pixel_interpretation: area
      datum: WGS84
      projection:
        family: utm
        zone: 33
        north: true
      geotransform: [400000.0, 30.0, 0.0, 5000000.0, 0.0, -30.0]

The projection is given either as raw PROJ text (`proj4: "+proj=merc ..."`)
or as a named family plus the keyword arguments of its GeoReference setter.
The pixel transform is given either as 3x3 `transform` rows or as a GDAL
6-parameter `geotransform`.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import yaml

from raster_georef.affine_transform import PixelInterpretation, geotransform_to_matrix
from raster_georef.datum import Datum
from raster_georef.georeference import GEOGRAPHIC_SPECIFICATION, GeoReference

logger = logging.getLogger(__name__)

CONFIG_SECTION = "georeference"

# Projection family name -> GeoReference setter
PROJECTION_FAMILIES = {
    "geographic": "set_geographic",
    "equirectangular": "set_equirectangular",
    "sinusoidal": "set_sinusoidal",
    "mercator": "set_mercator",
    "transverse_mercator": "set_transverse_mercator",
    "orthographic": "set_orthographic",
    "stereographic": "set_stereographic",
    "oblique_stereographic": "set_oblique_stereographic",
    "gnomonic": "set_gnomonic",
    "lambert_azimuthal": "set_lambert_azimuthal",
    "lambert_conformal": "set_lambert_conformal",
    "utm": "set_utm",
}


def _identity() -> List[List[float]]:
    return np.eye(3).tolist()


@dataclass
class GeoReferenceConfig:
    """Declarative description of a GeoReference.

    Attributes:
        pixel_interpretation: Pixel registration convention.
        datum: Well-known datum name, or a Datum.to_dict() mapping.
        projection: Either {'proj4': text} or {'family': name, **setter_kwargs}.
        transform: 3x3 pixel-to-point transform rows (point convention).
        center_on_zero: Optional longitude range override applied after
            the automatic decision.
    """
    pixel_interpretation: PixelInterpretation = PixelInterpretation.PIXEL_AS_AREA
    datum: Union[str, Dict[str, Any]] = "WGS84"
    projection: Dict[str, Any] = field(default_factory=lambda: {'proj4': GEOGRAPHIC_SPECIFICATION})
    transform: List[List[float]] = field(default_factory=_identity)
    center_on_zero: Optional[bool] = None

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'GeoReferenceConfig':
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            GeoReferenceConfig instance loaded from file

        Raises:
            FileNotFoundError: If configuration file does not exist
            ValueError: If configuration file is malformed or contains invalid values
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Please create a configuration file or use get_default_config()"
            )

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML configuration file: {e}") from e

        if not data or CONFIG_SECTION not in data:
            raise ValueError(
                f"Configuration file missing '{CONFIG_SECTION}' section: {path}\n"
                f"Expected structure: {CONFIG_SECTION}:\n  projection: ...\n  ..."
            )

        return cls.from_dict(data[CONFIG_SECTION])

    @staticmethod
    def _parse_pixel_interpretation(value: str) -> PixelInterpretation:
        try:
            return PixelInterpretation(value)
        except ValueError:
            valid = [p.value for p in PixelInterpretation]
            raise ValueError(
                f"Invalid pixel_interpretation '{value}'. Must be one of: {', '.join(valid)}"
            ) from None

    @staticmethod
    def _parse_transform(config: dict) -> List[List[float]]:
        if 'transform' in config and 'geotransform' in config:
            raise ValueError("Specify either 'transform' or 'geotransform', not both")

        if 'geotransform' in config:
            gt = config['geotransform']
            if not isinstance(gt, list) or len(gt) != 6:
                raise ValueError(f"'geotransform' must be a list of 6 numbers, got {gt!r}")
            return geotransform_to_matrix([float(v) for v in gt]).tolist()

        if 'transform' not in config:
            return _identity()

        rows = config['transform']
        if (
            not isinstance(rows, list)
            or len(rows) != 3
            or any(not isinstance(r, list) or len(r) != 3 for r in rows)
        ):
            raise ValueError(f"'transform' must be 3 rows of 3 numbers, got {rows!r}")
        try:
            return [[float(v) for v in row] for row in rows]
        except (TypeError, ValueError):
            raise ValueError(f"'transform' must contain only numbers, got {rows!r}") from None

    @staticmethod
    def _parse_projection(projection: Any) -> Dict[str, Any]:
        if isinstance(projection, str):
            return {'proj4': projection}
        if not isinstance(projection, dict):
            raise ValueError(f"'projection' must be a string or a mapping, got {type(projection)}")

        if ('proj4' in projection) == ('family' in projection):
            raise ValueError("'projection' must contain exactly one of 'proj4' or 'family'")
        if 'proj4' in projection:
            if len(projection) != 1:
                raise ValueError("'projection' with 'proj4' takes no other keys")
            return {'proj4': str(projection['proj4'])}

        family = projection['family']
        if family not in PROJECTION_FAMILIES:
            raise ValueError(
                f"Invalid projection family '{family}'. "
                f"Must be one of: {', '.join(PROJECTION_FAMILIES)}"
            )
        return dict(projection)

    @classmethod
    def from_dict(cls, config: dict) -> 'GeoReferenceConfig':
        """Create configuration from dictionary.

        Raises:
            ValueError: If configuration is invalid
        """
        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        pixel_interpretation = PixelInterpretation.PIXEL_AS_AREA
        if 'pixel_interpretation' in config:
            pixel_interpretation = cls._parse_pixel_interpretation(config['pixel_interpretation'])

        datum = config.get('datum', "WGS84")
        if isinstance(datum, str):
            Datum.well_known(datum)
        elif isinstance(datum, dict):
            Datum.from_dict(datum)
        else:
            raise ValueError(f"'datum' must be a name or a mapping, got {type(datum)}")

        projection = cls._parse_projection(config.get('projection', GEOGRAPHIC_SPECIFICATION))

        center_on_zero = config.get('center_on_zero')
        if center_on_zero is not None and not isinstance(center_on_zero, bool):
            raise ValueError(f"'center_on_zero' must be a boolean, got {center_on_zero!r}")

        return cls(
            pixel_interpretation=pixel_interpretation,
            datum=datum,
            projection=projection,
            transform=cls._parse_transform(config),
            center_on_zero=center_on_zero,
        )

    @classmethod
    def from_georeference(cls, georef: GeoReference) -> 'GeoReferenceConfig':
        """Describe an existing georeference."""
        return cls(
            pixel_interpretation=georef.pixel_interpretation,
            datum=georef.datum.to_dict(),
            projection={'proj4': georef.projection_specification.projection_text},
            transform=georef.transform.tolist(),
            center_on_zero=georef.center_on_zero,
        )

    def to_dict(self) -> dict:
        """Convert configuration to dictionary suitable for YAML serialization."""
        result = {
            'pixel_interpretation': self.pixel_interpretation.value,
            'datum': self.datum,
            'projection': dict(self.projection),
            'transform': [list(row) for row in self.transform],
        }
        if self.center_on_zero is not None:
            result['center_on_zero'] = self.center_on_zero
        return result

    def build_datum(self) -> Datum:
        if isinstance(self.datum, str):
            return Datum.well_known(self.datum)
        return Datum.from_dict(self.datum)

    def build(self) -> GeoReference:
        """Construct the described GeoReference.

        Raises:
            ValueError: If the projection keyword arguments do not match the
                family's setter.
            GeoReferenceError: If the georeference cannot be set up.
        """
        georef = GeoReference(
            datum=self.build_datum(),
            transform=self.transform,
            pixel_interpretation=self.pixel_interpretation,
        )

        if 'proj4' in self.projection:
            georef.set_projection_specification(self.projection['proj4'])
        else:
            params = {k: v for k, v in self.projection.items() if k != 'family'}
            setter = getattr(georef, PROJECTION_FAMILIES[self.projection['family']])
            try:
                setter(**params)
            except TypeError as e:
                raise ValueError(
                    f"Invalid parameters for projection family "
                    f"'{self.projection['family']}': {e}"
                ) from e

        if self.center_on_zero is not None:
            georef.set_lon_center(self.center_on_zero)
        return georef

    def save_to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file.

        Raises:
            IOError: If file cannot be written
        """
        config_path = Path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        # Wrap in section for consistency with from_yaml
        output = {CONFIG_SECTION: self.to_dict()}

        try:
            with open(config_path, 'w') as f:
                yaml.safe_dump(output, f, default_flow_style=False, sort_keys=False)
        except IOError as e:
            raise IOError(f"Failed to write configuration file: {e}") from e
        logger.debug(f"Saved georeference configuration to {config_path}")


def get_default_config() -> GeoReferenceConfig:
    """Return default configuration: geographic WGS84, identity transform.

    Example:
        >>> config = get_default_config()
        >>> config.build().is_projected
        False
    """
    return GeoReferenceConfig()
