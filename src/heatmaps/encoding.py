from enum import IntEnum
from numbers import Integral
from typing import Final

import numpy as np
from numpy.typing import NDArray

from exceptions import HeatmapValidationError, UnsupportedVersionError

V1_SCALE: Final[float] = 100.0  # heatmap values were multiplied by 100 before storing them as uint8


class EncodingVersion(IntEnum):
    V1 = 1


def to_encoding_version(version: object) -> EncodingVersion:
    """
    Validate an encoding version tag.

    :raises HeatmapValidationError: When `version` is not an integer.
    :raises UnsupportedVersionError: When no inverse transform exists for `version`.
    """
    if isinstance(version, bool) or not isinstance(version, Integral):
        raise HeatmapValidationError(
            f"version should be an integer, got {type(version).__name__}"
        )
    try:
        return EncodingVersion(int(version))
    except ValueError as error:
        raise UnsupportedVersionError(version) from error


def uint8_to_float64(
    values: NDArray[np.uint8], version: EncodingVersion
) -> NDArray[np.float64]:
    """Undo the transformation that converted heatmap values to uint8s."""
    match version:
        case EncodingVersion.V1:
            return values.astype(np.float64) / V1_SCALE
        case _:
            raise UnsupportedVersionError(version)
