from __future__ import annotations
from pathlib import Path
from typing import Union
import logging
import os

from dotenv import load_dotenv

from models.pixel_buffer import PixelBuffer
from models.snapshot import Snapshot
from repositories.image_repository import ImageRepository
from services.codec_service import CodecService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageService:
    """File-level load/save. Pixel logic stays in services.transforms."""
    def __init__(self,
                 codec_service: CodecService | None = None,
                 image_repository: ImageRepository | None = None,
                 default_format: str | None = None):
        self.codec_service = codec_service or CodecService()
        self.image_repository = image_repository or ImageRepository()
        self.default_format = default_format or os.getenv("DEFAULT_IMAGE_FORMAT", "png")

    def _format_for(self, path: Path, fmt: str | None) -> str:
        return fmt or self.image_repository.suffix_format(path) or self.default_format

    def load(self, path: Union[str, Path], fmt: str | None = None) -> PixelBuffer:
        """Read and decode a single image file."""
        path = Path(path)
        fmt = self._format_for(path, fmt)
        # Fail on the format before touching the disk
        self.codec_service.resolve_format(fmt)
        data = self.image_repository.read_bytes(path)
        buf = self.codec_service.decode(data, fmt)
        logger.info("Loaded %s (%dx%d, %s)", path, buf.width, buf.height, buf.format.value)
        return PixelBuffer(pixels=buf.pixels, format=buf.format, path=path)

    def save(self,
             image: Union[Snapshot, PixelBuffer],
             destination: Union[str, Path],
             fmt: str | None = None) -> Path:
        """
        Encode *image* and write it to *destination*.

        Args:
            image: Snapshot or PixelBuffer to persist
            destination: target file; missing parent directories are created
            fmt: codec format, defaults to the destination suffix
        Returns:
            Path: the written file
        """
        buf = image.pixels() if isinstance(image, Snapshot) else image
        if not isinstance(buf, PixelBuffer):
            raise TypeError(f"Cannot save {type(image).__name__}, expected Snapshot or PixelBuffer")

        destination = Path(destination)
        data = self.codec_service.encode(buf, self._format_for(destination, fmt))
        path = self.image_repository.write_bytes(destination, data)
        logger.info("Saved %dx%d image to %s", buf.width, buf.height, path)
        return path
