"""
Image sources and the decoders that resolve them into pixel buffers.

A heatmap image can be referenced as a base64 payload or as an http(s) URL.
Both are modelled as a tagged union (`ImageSource`) and resolved by an
`ImageDecoder`. The default `PillowImageDecoder` fetches URLs with `requests`,
opens the image bytes with Pillow and converts them to RGBA. Its helper
functions return Result/IOResult containers and log their failures, the
decoder itself raises `SourceResolutionError`.
"""

from exceptions import HeatmapError, HeatmapValidationError, SourceResolutionError

from .decoders import ImageDecoder, PillowImageDecoder, default_decoder
from .sources import Base64Payload, ImageSource, UrlReference, as_image_source

__all__ = (
    "Base64Payload",
    "HeatmapError",
    "HeatmapValidationError",
    "ImageDecoder",
    "ImageSource",
    "PillowImageDecoder",
    "SourceResolutionError",
    "UrlReference",
    "as_image_source",
    "default_decoder",
)
