import logging
from base64 import b64encode
from io import BytesIO
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
import requests
from PIL import Image

from heatmaps import decode_heatmap, interpolate_heatmaps
from image_sources import (
    Base64Payload,
    PillowImageDecoder,
    SourceResolutionError,
    UrlReference,
    default_decoder,
)
from settings import get_settings

from helper_functions import SOURCE_URL

MAX_BYTES = 1024 * 1024


def _png_bytes(channel_zero: list[list[int]]) -> bytes:
    red = np.asarray(channel_zero, dtype=np.uint8)
    rgba = np.stack([red, np.full_like(red, 3), np.full_like(red, 200), np.full_like(red, 255)], axis=-1)
    buffer = BytesIO()
    Image.fromarray(rgba).save(buffer, format="PNG")
    return buffer.getvalue()


def _png_payload(channel_zero: list[list[int]]) -> str:
    return b64encode(_png_bytes(channel_zero)).decode("ascii")


def _response(content: bytes, status_code: int = 200, headers: dict | None = None) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.headers = headers if headers is not None else {"Content-Length": str(len(content))}
    response.iter_content.return_value = [content[i : i + 4] for i in range(0, len(content), 4)]
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error")
    return response


@pytest.fixture
def decoder() -> PillowImageDecoder:
    return PillowImageDecoder(fetch_timeout=1.5, max_image_bytes=MAX_BYTES)


@pytest.mark.asyncio
class TestPillowImageDecoder:
    async def test_base64_png_is_rasterized(self, decoder: PillowImageDecoder):
        buffer = await decoder.resolve(Base64Payload(payload=_png_payload([[10, 20], [30, 40]])))

        assert (buffer.width, buffer.height) == (2, 2)
        assert buffer.channel_zero.tolist() == [10, 20, 30, 40]
        assert buffer.pixel_at(1, 1).tolist() == [40, 3, 200, 255]

    async def test_grayscale_image_is_converted_to_rgba(self, decoder: PillowImageDecoder):
        image_bytes = BytesIO()
        Image.fromarray(np.array([[5, 6]], dtype=np.uint8)).save(image_bytes, format="PNG")
        payload = b64encode(image_bytes.getvalue()).decode("ascii")

        buffer = await decoder.resolve(Base64Payload(payload=payload))

        assert buffer.data.shape == (1, 2, 4)
        assert buffer.channel_zero.tolist() == [5, 6]

    async def test_url_is_fetched_with_timeout(self, decoder: PillowImageDecoder):
        with patch("image_sources.decoders.requests.get", return_value=_response(_png_bytes([[1, 2]]))) as get:
            buffer = await decoder.resolve(UrlReference(url=SOURCE_URL))

        get.assert_called_once_with(SOURCE_URL, timeout=1.5, stream=True)
        assert buffer.channel_zero.tolist() == [1, 2]

    async def test_announced_oversized_body_is_not_downloaded(self):
        decoder = PillowImageDecoder(fetch_timeout=1.0, max_image_bytes=16)
        response = _response(b"", headers={"Content-Length": str(10 * 1024 * 1024)})

        with patch("image_sources.decoders.requests.get", return_value=response):
            with pytest.raises(SourceResolutionError, match="exceeds the limit of 16 bytes"):
                await decoder.resolve(UrlReference(url=SOURCE_URL))

        response.iter_content.assert_not_called()
        response.close.assert_called_once()

    async def test_streamed_body_stops_at_the_limit(self):
        decoder = PillowImageDecoder(fetch_timeout=1.0, max_image_bytes=16)
        response = _response(b"", headers={})
        response.iter_content.return_value = [b"x" * 10, b"x" * 10, b"x" * 10]

        with patch("image_sources.decoders.requests.get", return_value=response):
            with pytest.raises(SourceResolutionError, match="Image of 20 bytes exceeds the limit of 16 bytes"):
                await decoder.resolve(UrlReference(url=SOURCE_URL))

        response.close.assert_called_once()

    async def test_http_error_is_a_resolution_error(self, decoder: PillowImageDecoder):
        with patch("image_sources.decoders.requests.get", return_value=_response(b"", 404)):
            with pytest.raises(SourceResolutionError, match="404"):
                await decoder.resolve(UrlReference(url=SOURCE_URL))

    async def test_connection_error_is_a_resolution_error(self, decoder: PillowImageDecoder):
        with patch(
            "image_sources.decoders.requests.get",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            with pytest.raises(SourceResolutionError, match="connection refused"):
                await decoder.resolve(UrlReference(url=SOURCE_URL))

    @pytest.mark.parametrize(
        "payload",
        [
            pytest.param("aGVhdG1hcA==", id="not an image"),
            pytest.param("abc", id="incorrect padding"),
            pytest.param("", id="empty"),
        ],
    )
    async def test_unreadable_payload_is_a_resolution_error(
        self, decoder: PillowImageDecoder, payload: str, caplog: pytest.LogCaptureFixture
    ):
        with caplog.at_level(logging.DEBUG):
            with pytest.raises(SourceResolutionError, match="problem interpreting heatmap"):
                await decoder.resolve(Base64Payload(payload=payload))

        assert "ERROR" in {record.levelname for record in caplog.records}

    async def test_oversized_image_is_rejected(self):
        decoder = PillowImageDecoder(fetch_timeout=1.0, max_image_bytes=16)

        with pytest.raises(SourceResolutionError, match="exceeds the limit of 16 bytes"):
            await decoder.resolve(Base64Payload(payload=_png_payload([[1, 2], [3, 4]])))


@pytest.mark.integration
@pytest.mark.asyncio
class TestDecodingEncodedImages:
    async def test_decode_heatmap_from_png_payload(self, decoder: PillowImageDecoder):
        payload = _png_payload([[10, 20], [30, 40], [50, 60], [70, 80]])

        heatmap = await decode_heatmap(payload, 2, 1, decoder=decoder)

        assert heatmap.floors[0].tolist() == [0.1, 0.2, 0.3, 0.4]
        assert heatmap.floors[1].tolist() == [0.5, 0.6, 0.7, 0.8]

    async def test_interpolate_png_payload_with_url(self, decoder: PillowImageDecoder):
        payload = _png_payload([[10, 20]])
        with patch("image_sources.decoders.requests.get", return_value=_response(_png_bytes([[50, 40]]))):
            heatmap = await interpolate_heatmaps(payload, SOURCE_URL, 0.5, 1, 1, decoder=decoder)

        assert heatmap.floors[0].tolist() == [0.1 + 0.5 * (0.5 - 0.1), 0.2 + 0.5 * (0.4 - 0.2)]

    async def test_jpeg_payload_carries_channel_zero(self, decoder: PillowImageDecoder):
        image_bytes = BytesIO()
        Image.fromarray(np.full((8, 8), 100, dtype=np.uint8)).convert("RGB").save(
            image_bytes, format="JPEG", quality=100
        )
        payload = b64encode(image_bytes.getvalue()).decode("ascii")

        heatmap = await decode_heatmap(payload, 1, 1, decoder=decoder)

        np.testing.assert_allclose(heatmap.floors[0], 1.0, atol=0.02)


def test_default_decoder_uses_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HEATMAP_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("HEATMAP_MAX_IMAGE_BYTES", "4096")
    get_settings.cache_clear()
    try:
        decoder = default_decoder()
    finally:
        get_settings.cache_clear()

    assert decoder.fetch_timeout == 2.5
    assert decoder.max_image_bytes == 4096
