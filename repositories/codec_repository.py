from __future__ import annotations
from io import BytesIO
from typing import Iterable
import os

import cv2
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from models.errors import DecodeError, EncodeError, UnsupportedFormatError

# Load environment variables
load_dotenv()

# Canonical name → Pillow encoder name
_PIL_FORMATS = {
    "png": "PNG",
    "jpeg": "JPEG",
    "bmp": "BMP",
    "tiff": "TIFF",
    "webp": "WEBP",
}
_ALIASES = {"jpg": "jpeg", "tif": "tiff"}
# Formats that store single-channel images natively
_GRAY_CAPABLE = {"png", "jpeg", "bmp", "tiff"}
# Leading bytes each container starts with
_SIGNATURES = {
    "png": (b"\x89PNG\r\n\x1a\n",),
    "jpeg": (b"\xff\xd8\xff",),
    "bmp": (b"BM",),
    "tiff": (b"II*\x00", b"MM\x00*"),
}


def normalise_format(fmt: str) -> str:
    """'.JPG' → 'jpeg'"""
    name = str(fmt).strip().lower().lstrip(".")
    return _ALIASES.get(name, name)


def matches_format(data: bytes, name: str) -> bool:
    """True when *data* starts with the signature of canonical format *name*."""
    if name == "webp":
        return data[:4] == b"RIFF" and data[8:12] == b"WEBP"
    return any(data.startswith(sig) for sig in _SIGNATURES.get(name, ()))


class CodecRepository:
    """
    Bytes ⇄ numpy pixel arrays.
    Decoding goes through OpenCV (BGR → RGB), encoding through Pillow.
    Arrays are (H, W, 3) RGB or (H, W) gray, dtype uint8.
    """
    def __init__(self, formats: Iterable[str] | None = None, jpeg_quality: int | None = None):
        if formats is None:
            formats = os.getenv("IMAGE_FORMATS", "png,jpeg,bmp,tiff,webp").split(",")
        self.formats = {normalise_format(f) for f in formats if f.strip()} & set(_PIL_FORMATS)
        self.jpeg_quality = jpeg_quality or int(os.getenv("JPEG_QUALITY", "95"))

    def resolve(self, fmt: str) -> str:
        name = normalise_format(fmt)
        if name not in self.formats:
            raise UnsupportedFormatError(fmt, self.formats)
        return name

    def decode(self, data: bytes, fmt: str) -> np.ndarray:
        name = self.resolve(fmt)
        data = bytes(data)
        if not matches_format(data, name):
            raise DecodeError(f"Data is not {name}: unexpected leading bytes {data[:8]!r}")
        raw = np.asarray(bytearray(data), dtype=np.uint8)
        arr = cv2.imdecode(raw, cv2.IMREAD_UNCHANGED) if raw.size else None
        if arr is None:
            raise DecodeError(f"Could not decode {len(data)} bytes as {normalise_format(fmt)}")

        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            raise DecodeError(f"Unsupported sample type {arr.dtype} in {normalise_format(fmt)} data")

        if arr.ndim == 2:
            return arr
        if arr.shape[2] == 1:
            return arr[:, :, 0]
        if arr.shape[2] == 4:
            # alpha is discarded, no compositing
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGB)
        return cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)

    def encode(self, pixels: np.ndarray, fmt: str) -> bytes:
        name = self.resolve(fmt)
        if pixels.ndim == 2 and name not in _GRAY_CAPABLE:
            pixels = np.repeat(pixels[:, :, np.newaxis], 3, axis=2)

        options = {"quality": self.jpeg_quality} if name in ("jpeg", "webp") else {}
        out = BytesIO()
        try:
            PILImage.fromarray(np.ascontiguousarray(pixels)).save(out, format=_PIL_FORMATS[name], **options)
        except (OSError, ValueError, KeyError) as err:
            raise EncodeError(f"Could not encode {pixels.shape} image as {name}: {err}") from err
        return out.getvalue()
