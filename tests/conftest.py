import logging
from collections.abc import Callable

import numpy as np
import pytest
from loguru import logger
from numpy.typing import NDArray

from container_models.pixel_buffer import PixelBuffer

from helper_functions import FakeImageDecoder, make_pixel_buffer


class PropagateHandler(logging.Handler):
    """Handler that propagates loguru records to standard logging."""

    def emit(self, record: logging.LogRecord) -> None:
        logging.getLogger(record.name).handle(record)


@pytest.fixture
def caplog(caplog):
    """Fixture to enable caplog to capture loguru logs."""
    handler_id = logger.add(PropagateHandler(), format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(scope="session")
def pixel_buffer_factory() -> Callable[[NDArray | list], PixelBuffer]:
    return make_pixel_buffer


@pytest.fixture(scope="session")
def fake_decoder_factory() -> type[FakeImageDecoder]:
    return FakeImageDecoder


@pytest.fixture
def scenario_buffer() -> PixelBuffer:
    """A 2x2 single floor image encoding the bytes 10, 20, 30 and 40."""
    return make_pixel_buffer([[10, 20], [30, 40]])


@pytest.fixture
def three_floor_buffer() -> PixelBuffer:
    """A 3x6 image with three 3x2 floors, every byte is unique."""
    return make_pixel_buffer(np.arange(18, dtype=np.uint8).reshape(6, 3) * 10)
