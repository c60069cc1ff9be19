from __future__ import annotations
from pathlib import Path
from typing import Union

from models.pixel_buffer import PixelBuffer, PixelFormat


class Snapshot:
    """
    Finished, read-only result of a pipeline.
    Clones share the same PixelBuffer; buffers are never mutated, so sharing is safe
    across builders and threads.
    """
    __slots__ = ("_buffer",)

    def __init__(self, buffer: PixelBuffer):
        if not isinstance(buffer, PixelBuffer):
            raise TypeError(f"Snapshot wraps a PixelBuffer, got {type(buffer).__name__}")
        self._buffer = buffer

    def clone(self) -> "Snapshot":
        return Snapshot(self._buffer)

    def pixels(self) -> PixelBuffer:
        return self._buffer

    @property
    def width(self) -> int:
        return self._buffer.width

    @property
    def height(self) -> int:
        return self._buffer.height

    @property
    def format(self) -> PixelFormat:
        return self._buffer.format

    def save(self, path: Union[str, Path], fmt: str | None = None) -> Path:
        """
        Encode and write the snapshot to *path*.
        Format defaults to the file suffix.
        """
        from services.image_service import ImageService

        return ImageService().save(self, path, fmt)

    def __repr__(self):
        return f"Snapshot({self._buffer!r})"
