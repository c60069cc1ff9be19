"""
Pipeline Builder
Stages one working PixelBuffer: load it, apply any number of transforms in any
order, then build() an immutable Snapshot. A Snapshot can be loaded again by
another builder, so one base image can feed several independent pipelines.
"""
from __future__ import annotations
import logging
import os
from typing import Callable, Dict

from dotenv import load_dotenv

from models.errors import NotLoadedError
from models.load_source import (
    BufferSource,
    EncodedSource,
    FileSource,
    SnapshotSource,
    coerce_source,
)
from models.pixel_buffer import PixelBuffer
from models.snapshot import Snapshot
from services import transforms
from services.image_service import ImageService

# Load environment variables
load_dotenv()

ROTATE_BACKGROUND = int(os.getenv("ROTATE_BACKGROUND", "0"))

logger = logging.getLogger(__name__)


class PipelineBuilder:
    """
    Mutable staging area. Owns its working buffer exclusively; buffers are
    replaced, never edited, so snapshots loaded into a builder stay untouched.

        snap = (PipelineBuilder()
                .load("photo.png")
                .grayscale()
                .rotate(90)
                .build())
    """

    def __init__(self, image_service: ImageService | None = None,
                 rotate_background: int = ROTATE_BACKGROUND):
        self.image_service = image_service or ImageService()
        self.rotate_background = rotate_background
        self._buffer: PixelBuffer | None = None
        self._steps: Dict[str, Callable] = {
            "grayscale": self.grayscale,
            "invert_colors": self.invert_colors,
            "resize": self.resize,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
            "flip_vertical": self.flip_vertical,
        }

    # ─── Loading ──────────────────────────────────────────────────────
    def load(self, source, fmt: str | None = None) -> "PipelineBuilder":
        """
        Load the working image.

        Args:
            source: EncodedSource | FileSource | BufferSource | SnapshotSource,
                or a plain bytes / path / PixelBuffer / ndarray / Snapshot
            fmt: codec format for bytes or a suffix-less file
        Returns:
            PipelineBuilder: self, for chaining
        """
        source = coerce_source(source, fmt)

        if isinstance(source, EncodedSource):
            buf = self.image_service.codec_service.decode(source.data, source.format)
        elif isinstance(source, FileSource):
            buf = self.image_service.load(source.path, source.format)
        elif isinstance(source, BufferSource):
            buf = source.buffer
        elif isinstance(source, SnapshotSource):
            buf = source.snapshot.pixels()
        else:
            raise TypeError(f"Unknown load source {source!r}")

        self._buffer = buf
        logger.debug("Loaded %s from %s", buf, type(source).__name__)
        return self

    @property
    def is_loaded(self) -> bool:
        return self._buffer is not None

    def _current(self, operation: str) -> PixelBuffer:
        if self._buffer is None:
            raise NotLoadedError(operation)
        return self._buffer

    def _replace(self, operation: str, new_buffer: PixelBuffer) -> "PipelineBuilder":
        logger.debug("%s → %s", operation, new_buffer)
        self._buffer = new_buffer
        return self

    # ─── Transforms ───────────────────────────────────────────────────
    def grayscale(self) -> "PipelineBuilder":
        return self._replace("grayscale", transforms.grayscale(self._current("grayscale")))

    def invert_colors(self) -> "PipelineBuilder":
        return self._replace("invert_colors", transforms.invert_colors(self._current("invert_colors")))

    def resize(self, width: int, height: int) -> "PipelineBuilder":
        buf = self._current("resize")
        return self._replace("resize", transforms.resize(buf, width, height))

    def rotate(self, degrees: float) -> "PipelineBuilder":
        buf = self._current("rotate")
        return self._replace("rotate", transforms.rotate(buf, degrees, self.rotate_background))

    def flip_horizontal(self) -> "PipelineBuilder":
        return self._replace("flip_horizontal", transforms.flip_horizontal(self._current("flip_horizontal")))

    def flip_vertical(self) -> "PipelineBuilder":
        return self._replace("flip_vertical", transforms.flip_vertical(self._current("flip_vertical")))

    def apply(self, name: str, *args) -> "PipelineBuilder":
        """Run a transform by name, e.g. apply("resize", 64, 48)."""
        try:
            step = self._steps[name]
        except KeyError:
            raise ValueError(
                f"Unknown transform '{name}' (available: {', '.join(sorted(self._steps))})"
            ) from None
        return step(*args)

    # ─── Result ───────────────────────────────────────────────────────
    def build(self) -> Snapshot:
        return Snapshot(self._current("build"))
