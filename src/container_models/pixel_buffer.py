from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from PIL.Image import Image
from pydantic import BaseModel, ConfigDict

from container_models.base import ImageRGBA

NR_CHANNELS = 4


class PixelBuffer(BaseModel):
    """
    Raster data as produced by an image decoder.

    The data is stored as a read-only `(height, width, 4)` array of bytes. Only
    channel 0 carries encoded heatmap values, the other channels are ignored.
    """

    data: ImageRGBA

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra="forbid",
    )

    @property
    def height(self) -> int:
        """Return the height (number of rows) of the raster."""
        return self.data.shape[0]

    @property
    def width(self) -> int:
        """Return the width (number of columns) of the raster."""
        return self.data.shape[1]

    @property
    def channel_zero(self) -> NDArray[np.uint8]:
        """Channel 0 of every pixel in row-major order, i.e. the value of (x, y) is at `x + y * width`."""
        return self.data[..., 0].reshape(-1)

    def pixel_at(self, x: int, y: int) -> NDArray[np.uint8]:
        """Return the 4 channel bytes of the pixel in column `x` and row `y`."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"Pixel ({x}, {y}) is outside of the {self.width}x{self.height} raster"
            )
        return self.data[y, x]

    @classmethod
    def from_image(cls, image: Image) -> PixelBuffer:
        """Rasterize a Pillow image into RGBA bytes."""
        return cls(data=np.asarray(image.convert("RGBA"), dtype=np.uint8))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return np.array_equal(self.data, other.data)

    # unhashable, like the numpy arrays it holds
    __hash__ = None  # type: ignore[assignment]
