"""
Image decoders resolve an image source into a `PixelBuffer`.

The heatmap decoder never loads images itself. It receives an `ImageDecoder`,
which makes it possible to decode heatmaps from any raster backend and to test
the decoding without network or codec access.
"""

import asyncio
from base64 import b64decode
from io import BytesIO
from typing import Protocol

import requests
from PIL import Image
from returns.io import IOFailure, IOResult, IOResultE, IOSuccess, impure_safe
from returns.result import Failure, Success, safe

from container_models.pixel_buffer import PixelBuffer
from exceptions import SourceResolutionError
from settings import get_settings
from utils.logger import log_railway_function

from .sources import Base64Payload, UrlReference


class ImageDecoder(Protocol):
    """Collaborator that turns an image source into raster data."""

    async def resolve(self, source: Base64Payload | UrlReference) -> PixelBuffer:
        """
        Load the image behind `source`.

        :raises SourceResolutionError: When no pixel buffer can be produced.
        """
        ...


@log_railway_function("Failed to decode base64 heatmap payload")
@safe
def decode_base64(payload: str) -> bytes:
    return b64decode(payload, validate=True)


FETCH_CHUNK_SIZE = 64 * 1024


def check_size(n_bytes: int, max_bytes: int) -> None:
    if n_bytes > max_bytes:
        raise ValueError(f"Image of {n_bytes} bytes exceeds the limit of {max_bytes} bytes")


@log_railway_function("Failed to fetch heatmap image")
@impure_safe
def fetch_image_bytes(url: str, *, timeout: float, max_bytes: int) -> bytes:
    """
    Download an image, streaming the body and stopping once it exceeds `max_bytes`.

    :raises ValueError: When the announced or received body exceeds `max_bytes`.
    """
    response = requests.get(url, timeout=timeout, stream=True)
    try:
        response.raise_for_status()
        check_size(int(response.headers.get("Content-Length", 0)), max_bytes)
        image_bytes = bytearray()
        for chunk in response.iter_content(chunk_size=FETCH_CHUNK_SIZE):
            image_bytes += chunk
            # a missing or wrong Content-Length is caught here
            check_size(len(image_bytes), max_bytes)
        return bytes(image_bytes)
    finally:
        response.close()


@log_railway_function("Heatmap image is too large")
@safe
def limit_size(image_bytes: bytes, *, max_bytes: int) -> bytes:
    check_size(len(image_bytes), max_bytes)
    return image_bytes


@log_railway_function("Problem interpreting heatmap", "Successfully read heatmap image")
@impure_safe
def read_pixel_buffer(image_bytes: bytes) -> PixelBuffer:
    with Image.open(BytesIO(image_bytes)) as image:
        return PixelBuffer.from_image(image)


class PillowImageDecoder:
    """Decode base64 payloads and http(s) URLs with Pillow. Blocking work runs in a worker thread."""

    def __init__(self, fetch_timeout: float, max_image_bytes: int):
        self.fetch_timeout = fetch_timeout
        self.max_image_bytes = max_image_bytes

    def load(self, source: Base64Payload | UrlReference) -> IOResultE[PixelBuffer]:
        match source:
            case Base64Payload(payload=payload):
                image_bytes = IOResult.from_result(
                    decode_base64(payload).bind(
                        lambda raw: limit_size(raw, max_bytes=self.max_image_bytes)
                    )
                )
            case UrlReference(url=url):
                image_bytes = fetch_image_bytes(
                    str(url), timeout=self.fetch_timeout, max_bytes=self.max_image_bytes
                )
        return image_bytes.bind(read_pixel_buffer)

    async def resolve(self, source: Base64Payload | UrlReference) -> PixelBuffer:
        match await asyncio.to_thread(self.load, source):
            case IOSuccess(Success(buffer)):
                return buffer
            case IOFailure(Failure(error)):
                raise SourceResolutionError(
                    f"problem interpreting heatmap: {error}"
                ) from error
            case result:
                raise SourceResolutionError(f"Unexpected decoder result: {result!r}")


def default_decoder() -> PillowImageDecoder:
    """Build a Pillow decoder configured from the library settings."""
    settings = get_settings()
    return PillowImageDecoder(
        fetch_timeout=settings.fetch_timeout,
        max_image_bytes=settings.max_image_bytes,
    )
