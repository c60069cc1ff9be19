from __future__ import annotations
import logging

from models.pixel_buffer import PixelBuffer, PixelFormat
from repositories.codec_repository import CodecRepository

logger = logging.getLogger(__name__)


class CodecService:
    """
    PixelBuffer-level codec: wraps decoded arrays into buffers and unwraps
    buffers for encoding. Format checks live in the repository.
    """
    def __init__(self, codec_repository: CodecRepository | None = None):
        self.codec_repository = codec_repository or CodecRepository()

    @property
    def supported_formats(self):
        return frozenset(self.codec_repository.formats)

    def resolve_format(self, fmt: str) -> str:
        """Canonical format name; raises UnsupportedFormatError."""
        return self.codec_repository.resolve(fmt)

    def is_supported(self, fmt: str) -> bool:
        try:
            self.resolve_format(fmt)
        except ValueError:
            return False
        return True

    def decode(self, data: bytes, fmt: str) -> PixelBuffer:
        pixels = self.codec_repository.decode(data, fmt)
        fmt_tag = PixelFormat.GRAY8 if pixels.ndim == 2 else PixelFormat.RGB24
        buf = PixelBuffer(pixels=pixels, format=fmt_tag)
        logger.debug("Decoded %s image: %s", fmt, buf)
        return buf

    def encode(self, buf: PixelBuffer, fmt: str) -> bytes:
        data = self.codec_repository.encode(buf.pixels, fmt)
        logger.debug("Encoded %s as %s (%d bytes)", buf, fmt, len(data))
        return data
