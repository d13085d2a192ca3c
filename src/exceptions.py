"""Errors raised while decoding or combining heatmaps, shared by all packages."""


class HeatmapError(Exception):
    """Base class for all errors raised while decoding or combining heatmaps."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class HeatmapValidationError(HeatmapError, ValueError):
    """Raised when an argument does not meet its preconditions, before any I/O happens."""


class UnsupportedVersionError(HeatmapValidationError):
    """Raised when a heatmap is encoded with a version that has no inverse transform."""

    def __init__(self, version: object):
        self.version = version
        super().__init__(f"Only version 1 is supported, got version {version!r}")


class SourceResolutionError(HeatmapError):
    """Raised when an image source cannot be turned into a pixel buffer."""


class ShapeMismatchError(HeatmapError, ValueError):
    """Raised when the geometry of the input does not fit the requested floors."""
