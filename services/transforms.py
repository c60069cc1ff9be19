"""
Pure pixel transforms.

Every function takes a PixelBuffer and returns a *new* PixelBuffer; inputs are
read-only and never touched. All resampling is nearest-neighbour, so right-angle
rotations, flips and same-size resizes are exact pixel permutations.
"""
from __future__ import annotations
import math
from numbers import Integral

import numpy as np

from models.errors import InvalidDimensionsError
from models.pixel_buffer import PixelBuffer, PixelFormat

# ITU-R BT.709 luma weights, scaled by 10000 so rounding stays exact
LUMA_WEIGHTS = np.array([2126, 7152, 722], dtype=np.int64)
LUMA_SCALE = 10000


def grayscale(buf: PixelBuffer) -> PixelBuffer:
    """
    RGB24 → GRAY8 with gray = round(0.2126 R + 0.7152 G + 0.0722 B), halves rounded up.
    GRAY8 input is already gray and comes back unchanged.
    """
    if buf.format is PixelFormat.GRAY8:
        return PixelBuffer._wrap(buf.pixels.copy(), PixelFormat.GRAY8)

    luma = buf.pixels.astype(np.int64) @ LUMA_WEIGHTS
    gray = ((luma + LUMA_SCALE // 2) // LUMA_SCALE).astype(np.uint8)
    return PixelBuffer._wrap(gray, PixelFormat.GRAY8)


def invert_colors(buf: PixelBuffer) -> PixelBuffer:
    """Each 8-bit channel c → 255 - c. Format is preserved."""
    inverted = np.subtract(np.uint8(255), buf.pixels, dtype=np.uint8)
    return PixelBuffer._wrap(inverted, buf.format)


def _check_dimension(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidDimensionsError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidDimensionsError(f"{name} must be > 0, got {value}")
    return int(value)


def _nearest_indices(src_len: int, dst_len: int) -> np.ndarray:
    # Source index under the centre of each destination pixel:
    # floor((d + 0.5) * src / dst), kept in integers to stay exact.
    d = np.arange(dst_len, dtype=np.int64)
    return ((2 * d + 1) * src_len) // (2 * dst_len)


def resize(buf: PixelBuffer, new_width: int, new_height: int) -> PixelBuffer:
    new_width = _check_dimension("new_width", new_width)
    new_height = _check_dimension("new_height", new_height)

    xs = _nearest_indices(buf.width, new_width)
    ys = _nearest_indices(buf.height, new_height)
    resized = buf.pixels[ys[:, np.newaxis], xs[np.newaxis, :]]
    return PixelBuffer._wrap(np.ascontiguousarray(resized), buf.format)


def _snap(value: float) -> float:
    # cos(pi/2) is 6e-17, not 0; rounding keeps right angles exact.
    return round(value, 12) + 0.0


def rotated_canvas(width: int, height: int, degrees: float):
    """Smallest (width, height) that holds a width x height image rotated by *degrees*."""
    radians = math.radians(degrees)
    cos_t, sin_t = abs(_snap(math.cos(radians))), abs(_snap(math.sin(radians)))
    new_width = math.ceil(width * cos_t + height * sin_t)
    new_height = math.ceil(height * cos_t + width * sin_t)
    return max(new_width, 1), max(new_height, 1)


def rotate(buf: PixelBuffer, degrees: float, background: int = 0) -> PixelBuffer:
    """
    Rotate clockwise (image y axis points down) about the centre.

    The canvas grows to fit the whole rotated image; the source is centred on it.
    Each destination pixel centre is mapped back into the source and takes the
    nearest source pixel. Destination pixels that land outside the source are
    filled with *background* (every channel).
    """
    degrees = float(degrees)
    if not math.isfinite(degrees):
        raise ValueError(f"Rotation angle must be finite, got {degrees}")
    if not 0 <= int(background) <= 255:
        raise ValueError(f"Background must be in [0, 255], got {background}")

    width, height = buf.width, buf.height
    new_width, new_height = rotated_canvas(width, height, degrees)

    radians = math.radians(degrees)
    cos_t, sin_t = _snap(math.cos(radians)), _snap(math.sin(radians))

    dst_y, dst_x = np.mgrid[0:new_height, 0:new_width].astype(np.float64)
    u = dst_x + 0.5 - new_width / 2.0
    v = dst_y + 0.5 - new_height / 2.0

    # Inverse rotation: destination offset → source coordinates
    src_x = cos_t * u + sin_t * v + width / 2.0
    src_y = -sin_t * u + cos_t * v + height / 2.0
    ix = np.floor(src_x).astype(np.intp)
    iy = np.floor(src_y).astype(np.intp)
    inside = (ix >= 0) & (ix < width) & (iy >= 0) & (iy < height)

    shape = (new_height, new_width) + buf.pixels.shape[2:]
    rotated = np.full(shape, int(background), dtype=np.uint8)
    rotated[inside] = buf.pixels[iy[inside], ix[inside]]
    return PixelBuffer._wrap(rotated, buf.format)


def flip_horizontal(buf: PixelBuffer) -> PixelBuffer:
    """result[W-1-x, y] = buf[x, y]"""
    return PixelBuffer._wrap(buf.pixels[:, ::-1].copy(), buf.format)


def flip_vertical(buf: PixelBuffer) -> PixelBuffer:
    """result[x, H-1-y] = buf[x, y]"""
    return PixelBuffer._wrap(buf.pixels[::-1].copy(), buf.format)
