from __future__ import annotations
from collections.abc import Sequence
from functools import partial
from typing import Annotated, TypeAlias

from numpy import array, can_cast, float64, ndarray, uint8
from numpy import dtype as np_dtype
from numpy.typing import DTypeLike, NDArray
from pydantic import AfterValidator, BeforeValidator, PlainSerializer


def serialize_ndarray(array_: NDArray) -> list:
    """Serialize numpy array to a Python list for JSON serialization."""
    return array_.tolist()


def coerce_to_array(dtype: DTypeLike, value: Sequence | NDArray) -> NDArray:
    """
    Coerce input to a numpy array of the given dtype.

    Handles JSON deserialization where Python creates int64 integers by default.
    """
    if isinstance(value, Sequence):
        try:
            return array(value, dtype=dtype)
        except OverflowError as ofe:
            raise ValueError("Array's value(s) out of range") from ofe
        except TypeError as te:
            raise ValueError(f"Array's value(s) cannot be stored as {np_dtype(dtype).name}") from te
    if isinstance(value, ndarray) and can_cast(value.dtype, dtype, casting="safe"):
        return value.astype(dtype, copy=False)
    return value


def validate_shape(n_dims: int, value: NDArray) -> NDArray:
    if (array_dims := len(value.shape)) != n_dims:
        raise ValueError(
            f"Array shape mismatch, expected {n_dims} dimension(s), but got {array_dims}"
        )
    return value


def validate_dtype(dtype: DTypeLike, value: NDArray) -> NDArray:
    if value.dtype != dtype:
        raise ValueError(
            f"Array dtype mismatch, expected {np_dtype(dtype).name}, but got {value.dtype.name}"
        )
    return value


def validate_channels(n_channels: int, value: NDArray) -> NDArray:
    if value.shape[-1] != n_channels:
        raise ValueError(
            f"Expected {n_channels} channels per pixel, but got {value.shape[-1]}"
        )
    return value


def validate_not_empty(value: NDArray) -> NDArray:
    if value.size == 0:
        raise ValueError("Array must contain at least one element")
    return value


def freeze(value: NDArray) -> NDArray:
    """Return a read-only copy so that containers cannot be mutated through the array."""
    frozen = array(value, copy=True)
    frozen.setflags(write=False)
    return frozen


# Tier 1: Base types
FloatArray: TypeAlias = Annotated[
    NDArray[float64],
    BeforeValidator(partial(coerce_to_array, float64)),
    AfterValidator(partial(validate_dtype, float64)),
    PlainSerializer(serialize_ndarray),
]
UInt8Array: TypeAlias = Annotated[
    NDArray[uint8],
    BeforeValidator(partial(coerce_to_array, uint8)),
    AfterValidator(partial(validate_dtype, uint8)),
    PlainSerializer(serialize_ndarray),
]

# Tier 2: Shape and data types
FloatArray1D: TypeAlias = Annotated[FloatArray, AfterValidator(partial(validate_shape, 1))]
UInt8Array3D: TypeAlias = Annotated[UInt8Array, AfterValidator(partial(validate_shape, 3))]

# Tier 3: Semantic context
FloorValues: TypeAlias = Annotated[FloatArray1D, AfterValidator(freeze)]  # Shape: (W * h,)
ImageRGBA: TypeAlias = Annotated[
    UInt8Array3D,
    AfterValidator(partial(validate_channels, 4)),
    AfterValidator(validate_not_empty),
    AfterValidator(freeze),
]  # Shape: (H, W, 4)
