"""
Error taxonomy for georeferencing operations.

Setup-time failures (new transform, projection specification or datum) always
propagate to the caller. Failures of individual samples inside bounding-box
reprojection and the longitude-centering probe are absorbed by those
components and never reach the caller.
"""

from typing import Optional


class GeoReferenceError(Exception):
    """Base class for every error raised by raster_georef."""


class TransformSingularityError(GeoReferenceError):
    """The affine transform cannot be inverted or applied.

    Raised when a new transform (or its area-convention derivative) is
    singular, and when a homogeneous mapping hits a near-zero denominator.
    """


class ProjectionEngineError(GeoReferenceError):
    """The projection engine failed to initialize or to convert a coordinate.

    Attributes:
        code: Short diagnostic code from the delegate (its error class name,
            or 'non-finite' when the engine returned inf/nan).
        message: Diagnostic message from the delegate.
        definition: Projection definition the engine was bound to, if known.
    """

    def __init__(self, code: str, message: str, definition: Optional[str] = None):
        self.code = code
        self.message = message
        self.definition = definition
        text = f"Projection engine error [{code}]: {message}"
        if definition:
            text += f" (definition: '{definition}')"
        super().__init__(text)


class InvalidSpecificationError(GeoReferenceError, ValueError):
    """A projection specification string is malformed."""


class UnsupportedOperationError(GeoReferenceError, NotImplementedError):
    """An image resource backend does not implement the requested capability."""
