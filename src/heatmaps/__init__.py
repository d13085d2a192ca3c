"""
Decoding and interpolation of multi-floor heatmaps.

A heatmap is delivered as a raster image in which every floor occupies a band
of rows, floor 0 on top. Channel 0 of each pixel holds the heatmap value
encoded as a byte; version 1 of the encoding stores `round(value * 100)`.

Entry points
------------
- `decode_heatmap`: resolve an image source and split it into decoded floors.
- `interpolate_heatmaps`: decode two sources concurrently and blend them.

Both are coroutines and raise a subclass of `HeatmapError` on failure. The
synchronous steps (`decode_pixel_buffer`, `blend_heatmaps`) return `ResultE`
containers and log their failures when they are detected.
"""

from exceptions import (
    HeatmapError,
    HeatmapValidationError,
    ShapeMismatchError,
    SourceResolutionError,
    UnsupportedVersionError,
)

from .decoding import decode_heatmap, decode_pixel_buffer
from .encoding import EncodingVersion
from .interpolation import blend_heatmaps, interpolate_heatmaps

__all__ = (
    "EncodingVersion",
    "HeatmapError",
    "HeatmapValidationError",
    "ShapeMismatchError",
    "SourceResolutionError",
    "UnsupportedVersionError",
    "blend_heatmaps",
    "decode_heatmap",
    "decode_pixel_buffer",
    "interpolate_heatmaps",
)
