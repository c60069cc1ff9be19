from __future__ import annotations
from pathlib import Path
from typing import Union
import logging

from models.errors import ImageIOError

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O for encoded images. Knows nothing about pixels.
    """

    @staticmethod
    def read_bytes(path: Union[str, Path]) -> bytes:
        path = Path(path)
        if not path.is_file():
            raise ImageIOError(f"Image not found or unreadable: {path}")
        try:
            return path.read_bytes()
        except OSError as err:
            raise ImageIOError(f"Could not read {path}: {err}") from err

    @staticmethod
    def write_bytes(path: Union[str, Path], data: bytes) -> Path:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as err:
            raise ImageIOError(f"Could not write {path}: {err}") from err
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path

    @staticmethod
    def suffix_format(path: Union[str, Path]) -> str | None:
        """'photo.JPG' → 'JPG'; None when the path has no suffix."""
        suffix = Path(path).suffix
        return suffix[1:] if suffix else None
