from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence, Tuple
import numpy as np

from models.errors import InvalidDimensionsError, PixelFormatError


class PixelFormat(str, Enum):
    RGB24 = "rgb24"
    GRAY8 = "gray8"

    @property
    def channels(self) -> int:
        return 3 if self is PixelFormat.RGB24 else 1


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Immutable grid of 8-bit samples.
    pixels has shape (H, W, 3) for RGB24 or (H, W) for GRAY8, dtype uint8.
    The backing array is read-only; every transform allocates a new buffer.
    """
    pixels: np.ndarray
    format: PixelFormat
    path: Path | None = field(default=None, compare=False)  # Source of the image, if any.

    def __post_init__(self):
        pixels = self.pixels
        if pixels.dtype != np.uint8:
            raise PixelFormatError(f"Pixel data must be uint8, got {pixels.dtype}")
        expected_ndim = 3 if self.format is PixelFormat.RGB24 else 2
        if pixels.ndim != expected_ndim or (expected_ndim == 3 and pixels.shape[2] != 3):
            raise PixelFormatError(
                f"Array of shape {pixels.shape} does not match format {self.format.value}"
            )
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise InvalidDimensionsError(
                f"Image must be at least 1x1, got {pixels.shape[1]}x{pixels.shape[0]}"
            )
        # Keep a private, read-only copy unless the array already is one.
        if pixels.flags.writeable or not pixels.flags.owndata:
            pixels = np.array(pixels, copy=True)
            pixels.flags.writeable = False
            object.__setattr__(self, "pixels", pixels)

    # ─── Constructors ─────────────────────────────────────────────────
    @classmethod
    def from_array(cls, array: np.ndarray, format: PixelFormat | str | None = None,
                   path: Path | str | None = None) -> "PixelBuffer":
        """
        Build a buffer from a caller-owned array. The data is copied so later
        writes to *array* never reach the buffer.
        """
        arr = np.asarray(array)
        if arr.ndim < 2:
            raise InvalidDimensionsError(f"Expected a 2D pixel grid, got shape {arr.shape}")
        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[:, :, 0]
        if format is None:
            if arr.ndim == 2:
                format = PixelFormat.GRAY8
            elif arr.ndim == 3 and arr.shape[2] == 3:
                format = PixelFormat.RGB24
            else:
                raise PixelFormatError(f"Cannot infer pixel format from shape {arr.shape}")
        if arr.dtype != np.uint8:
            if not np.issubdtype(arr.dtype, np.integer) or arr.size and (arr.min() < 0 or arr.max() > 255):
                raise PixelFormatError(f"Cannot store {arr.dtype} values as 8-bit samples")
            arr = arr.astype(np.uint8)
        arr = np.array(arr, copy=True)
        arr.flags.writeable = False
        return cls(pixels=arr, format=PixelFormat(format),
                   path=Path(path) if path is not None else None)

    @classmethod
    def from_rgb_tuples(cls, width: int, height: int,
                        samples: Iterable[Sequence[int]]) -> "PixelBuffer":
        """Row-major list of (R, G, B) tuples → RGB24 buffer."""
        flat = np.asarray(list(samples), dtype=np.int64)
        if flat.shape != (width * height, 3):
            raise InvalidDimensionsError(
                f"Expected {width * height} RGB samples for {width}x{height}, got shape {flat.shape}"
            )
        return cls.from_array(flat.reshape(height, width, 3), PixelFormat.RGB24)

    @classmethod
    def _wrap(cls, pixels: np.ndarray, format: PixelFormat) -> "PixelBuffer":
        # Used by transforms that already own a freshly allocated array.
        pixels.flags.writeable = False
        return cls(pixels=pixels, format=format)

    # ─── Read access ─────────────────────────────────────────────────
    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def channels(self) -> int:
        return self.format.channels

    @property
    def samples(self) -> np.ndarray:
        """Row-major samples; entry y*width + x is the pixel at (x, y)."""
        return self.pixels.reshape(self.width * self.height, -1)

    def pixel(self, x: int, y: int) -> Tuple[int, ...]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return tuple(int(v) for v in self.samples[y * self.width + x])

    def as_rgb(self) -> np.ndarray:
        """(H, W, 3) read-only view; gray samples are expanded to R=G=B."""
        if self.format is PixelFormat.RGB24:
            return self.pixels
        rgb = np.repeat(self.pixels[:, :, np.newaxis], 3, axis=2)
        rgb.flags.writeable = False
        return rgb

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.format is other.format and np.array_equal(self.pixels, other.pixels)

    __hash__ = None

    def __repr__(self):
        return f"PixelBuffer({self.width}x{self.height}, {self.format.value})"
