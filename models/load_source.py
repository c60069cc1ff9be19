from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Union
import numpy as np

from models.pixel_buffer import PixelBuffer
from models.snapshot import Snapshot


@dataclass(frozen=True)
class EncodedSource:
    """Encoded image bytes plus the codec format they are stored in."""
    data: bytes
    format: str


@dataclass(frozen=True)
class FileSource:
    path: Path
    format: str | None = None  # None → taken from the file suffix


@dataclass(frozen=True)
class BufferSource:
    buffer: PixelBuffer


@dataclass(frozen=True)
class SnapshotSource:
    snapshot: Snapshot


LoadSource = Union[EncodedSource, FileSource, BufferSource, SnapshotSource]


def coerce_source(value, fmt: str | None = None) -> LoadSource:
    """
    Wrap a plain value into the matching LoadSource variant.
        bytes          → EncodedSource (fmt required)
        str | Path     → FileSource
        PixelBuffer    → BufferSource
        np.ndarray     → BufferSource (copied)
        Snapshot       → SnapshotSource
    """
    if isinstance(value, (EncodedSource, FileSource, BufferSource, SnapshotSource)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        if not fmt:
            raise ValueError("Loading encoded bytes requires a format, e.g. format='png'")
        return EncodedSource(bytes(value), fmt)
    if isinstance(value, (str, Path)):
        return FileSource(Path(value), fmt)
    if isinstance(value, PixelBuffer):
        return BufferSource(value)
    if isinstance(value, np.ndarray):
        return BufferSource(PixelBuffer.from_array(value))
    if isinstance(value, Snapshot):
        return SnapshotSource(value)
    raise TypeError(f"Cannot load an image from {type(value).__name__}")
