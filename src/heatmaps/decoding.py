from numbers import Integral

import numpy as np
from loguru import logger
from returns.result import safe

from container_models.heatmap import Heatmap
from container_models.pixel_buffer import PixelBuffer
from exceptions import HeatmapValidationError, ShapeMismatchError
from image_sources import ImageDecoder, as_image_source, default_decoder
from utils.logger import log_railway_function
from utils.railway import unwrap_or_raise

from .encoding import EncodingVersion, to_encoding_version, uint8_to_float64


def validate_floor_count(floor_count: object) -> int:
    """:raises HeatmapValidationError: When `floor_count` is not a positive integer."""
    if isinstance(floor_count, bool) or not isinstance(floor_count, Integral):
        raise HeatmapValidationError(
            f"floor count should be an integer, got {type(floor_count).__name__}"
        )
    if floor_count < 1:
        raise HeatmapValidationError(
            f"floor count should be positive, got {floor_count}"
        )
    return int(floor_count)


@log_railway_function("Failed to split heatmap image into floors", "Successfully decoded heatmap floors")
@safe
def decode_pixel_buffer(
    buffer: PixelBuffer, floor_count: int, version: EncodingVersion
) -> Heatmap:
    """
    Split the channel 0 values of a pixel buffer into floors and decode them.

    Floors are stacked vertically in the image with floor 0 on top, so floor `f`
    consists of the `width * floor_height` values starting at row `f * floor_height`.

    :param buffer: The raster holding the encoded heatmap.
    :param floor_count: The number of floors stacked in the raster.
    :param version: The encoding version of the values.
    :returns: The decoded `Heatmap`, a `HeatmapValidationError` failure when
        `floor_count` is not a positive integer, or a `ShapeMismatchError` failure
        when the raster height is not a positive multiple of `floor_count`.
    """
    floor_count = validate_floor_count(floor_count)
    floor_height, remainder = divmod(buffer.height, floor_count)
    if remainder or not floor_height:
        raise ShapeMismatchError(
            f"Heatmap image has height {buffer.height}, which is not "
            f"a positive multiple of the floor count {floor_count}"
        )
    values = uint8_to_float64(buffer.channel_zero, version)
    return Heatmap(
        floors=tuple(np.split(values, floor_count)),
        width=buffer.width,
        height=floor_height,
    )


async def decode_heatmap(
    source: object,
    floor_count: int,
    version: int,
    *,
    decoder: ImageDecoder | None = None,
) -> Heatmap:
    """
    Decode a heatmap image into one array of float values per floor.

    All arguments are validated before the image is loaded. To get the value at
    `(x, y)` of a floor, read position `x + y * width` of that floor's array.

    :param source: A base64 encoded image, an http(s) URL, or an `ImageSource`.
    :param floor_count: The number of floors this heatmap represents.
    :param version: The encoding version of the heatmap values, only 1 is supported.
    :param decoder: The decoder that loads the image, defaults to the Pillow decoder.
    :returns: The decoded `Heatmap`.
    :raises HeatmapValidationError: When an argument is invalid.
    :raises UnsupportedVersionError: When `version` is not 1.
    :raises SourceResolutionError: When the image cannot be loaded.
    :raises ShapeMismatchError: When the image height is not divisible by `floor_count`.
    """
    encoding_version = to_encoding_version(version)
    floor_count = validate_floor_count(floor_count)
    image_source = as_image_source(source)

    decoder = decoder or default_decoder()
    logger.debug(f"Resolving {image_source.kind} heatmap source with {floor_count} floor(s)")
    buffer = await decoder.resolve(image_source)
    return unwrap_or_raise(decode_pixel_buffer(buffer, floor_count, encoding_version))
