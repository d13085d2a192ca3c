from .heatmap import Heatmap
from .pixel_buffer import PixelBuffer

__all__ = ("Heatmap", "PixelBuffer")
