import asyncio
import math
from numbers import Real

from returns.result import safe

from container_models.heatmap import Heatmap
from exceptions import HeatmapValidationError, ShapeMismatchError
from image_sources import ImageDecoder, default_decoder
from utils.logger import log_railway_function
from utils.railway import unwrap_or_raise

from .decoding import decode_heatmap, validate_floor_count
from .encoding import to_encoding_version


def validate_fraction(fraction: object) -> float:
    """:raises HeatmapValidationError: When `fraction` is not a finite real number."""
    if isinstance(fraction, bool) or not isinstance(fraction, Real):
        raise HeatmapValidationError(
            f"fraction should be a real number, got {type(fraction).__name__}"
        )
    if not math.isfinite(fraction):
        raise HeatmapValidationError(f"fraction should be finite, got {fraction}")
    return float(fraction)


@log_railway_function("Failed to interpolate heatmaps", "Successfully interpolated heatmaps")
@safe
def blend_heatmaps(first: Heatmap, second: Heatmap, fraction: float) -> Heatmap:
    """
    Linearly interpolate between two heatmaps of the same shape.

    Every value becomes `a + fraction * (b - a)`. A fraction of 0 reproduces `first`
    exactly, values outside [0, 1] extrapolate. The inputs are left untouched.
    """
    if not first.has_same_shape(second):
        raise ShapeMismatchError(
            f"Cannot interpolate a {first.floor_count} floor {first.width}x{first.height} heatmap "
            f"with a {second.floor_count} floor {second.width}x{second.height} heatmap"
        )
    return Heatmap(
        floors=tuple(a + fraction * (b - a) for a, b in zip(first.floors, second.floors)),
        width=first.width,
        height=first.height,
    )


async def interpolate_heatmaps(
    source_a: object,
    source_b: object,
    fraction: float,
    floor_count: int,
    version: int,
    *,
    decoder: ImageDecoder | None = None,
) -> Heatmap:
    """
    Decode two heatmaps concurrently and interpolate between them.

    :param source_a: The heatmap returned for a fraction of 0.
    :param source_b: The heatmap returned for a fraction of 1.
    :param fraction: The blend fraction, conventionally in [0, 1].
    :param floor_count: The number of floors both heatmaps represent.
    :param version: The encoding version of both heatmaps.
    :param decoder: The decoder that loads the images, defaults to the Pillow decoder.
    :returns: A new `Heatmap` with the dimensions of `source_a`.
    :raises HeatmapValidationError: When an argument is invalid.
    :raises SourceResolutionError: When either image cannot be loaded.
    :raises ShapeMismatchError: When either image does not fit `floor_count`,
        or the decoded heatmaps differ in shape.
    """
    fraction = validate_fraction(fraction)
    to_encoding_version(version)
    validate_floor_count(floor_count)

    decoder = decoder or default_decoder()
    first, second = await asyncio.gather(
        decode_heatmap(source_a, floor_count, version, decoder=decoder),
        decode_heatmap(source_b, floor_count, version, decoder=decoder),
    )
    return unwrap_or_raise(blend_heatmaps(first, second, fraction))
