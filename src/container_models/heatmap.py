"""Heatmap container.

A decoded heatmap holds one flat array of float values per floor. All floors
share the same dimensions, and the value at `(x, y)` of a floor is stored at
position `x + y * width`.

::

    +--------------------------------------+
    |               Heatmap                |
    |--------------------------------------|
    | floors : tuple[FloorValues, ...]     |
    | width  : int (columns)               |
    | height : int (rows per floor)        |
    +--------------------------------------+
    | floor_count -> int                   |
    | floor_grid(floor) -> (height, width) |
    | value_at(floor, x, y) -> float       |
    | has_same_shape(other) -> bool        |
    +--------------------------------------+

Heatmaps are frozen and their arrays are read-only. Operations that combine
heatmaps always allocate a new instance.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from container_models.base import FloorValues


class Heatmap(BaseModel):
    floors: tuple[FloorValues, ...] = Field(min_length=1)
    width: PositiveInt
    height: PositiveInt

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra="forbid",
    )

    @model_validator(mode="after")
    def _check_floor_sizes(self) -> Heatmap:
        expected = self.width * self.height
        for floor, values in enumerate(self.floors):
            if values.size != expected:
                raise ValueError(
                    f"Floor {floor} has {values.size} values, expected {self.width} * {self.height} = {expected}"
                )
        return self

    @property
    def floor_count(self) -> int:
        return len(self.floors)

    def floor_grid(self, floor: int) -> NDArray[np.float64]:
        """Return a read-only `(height, width)` view on the values of a floor."""
        return self.floors[floor].reshape(self.height, self.width)

    def value_at(self, floor: int, x: int, y: int) -> float:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"Position ({x}, {y}) is outside of the {self.width}x{self.height} heatmap"
            )
        return float(self.floors[floor][x + y * self.width])

    def has_same_shape(self, other: Heatmap) -> bool:
        return (self.floor_count, self.width, self.height) == (
            other.floor_count,
            other.width,
            other.height,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Heatmap):
            return NotImplemented
        return self.has_same_shape(other) and all(
            np.array_equal(mine, theirs)
            for mine, theirs in zip(self.floors, other.floors)
        )

    # unhashable, like the numpy arrays it holds
    __hash__ = None  # type: ignore[assignment]
