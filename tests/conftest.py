"""Shared fixtures: small hand-made buffers with known pixel values."""
import numpy as np
import pytest

from models.pixel_buffer import PixelBuffer, PixelFormat


@pytest.fixture
def primaries_2x2() -> PixelBuffer:
    """Red, green / blue, white (row-major)."""
    return PixelBuffer.from_rgb_tuples(
        2, 2, [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 255)]
    )


@pytest.fixture
def noise_rgb() -> PixelBuffer:
    """Random 5x3 RGB buffer; odd, non-square dimensions on purpose."""
    rng = np.random.default_rng(42)
    return PixelBuffer.from_array(rng.integers(0, 256, size=(3, 5, 3), dtype=np.uint8))


@pytest.fixture
def noise_gray() -> PixelBuffer:
    rng = np.random.default_rng(7)
    return PixelBuffer.from_array(rng.integers(0, 256, size=(4, 6), dtype=np.uint8))


@pytest.fixture
def single_pixel() -> PixelBuffer:
    return PixelBuffer.from_rgb_tuples(1, 1, [(12, 34, 56)])


@pytest.fixture(params=["rgb", "gray"])
def any_buffer(request, noise_rgb, noise_gray) -> PixelBuffer:
    return noise_rgb if request.param == "rgb" else noise_gray


@pytest.fixture
def white_square() -> PixelBuffer:
    return PixelBuffer(pixels=np.full((4, 4, 3), 255, dtype=np.uint8), format=PixelFormat.RGB24)
