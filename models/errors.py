class PipelineError(Exception):
    """Base class for every error raised by the image pipeline."""


class NotLoadedError(PipelineError):
    """A transform or build() was requested before any image was loaded."""

    def __init__(self, operation: str):
        super().__init__(f"Cannot run '{operation}': no image loaded, call load() first")
        self.operation = operation


class InvalidDimensionsError(PipelineError, ValueError):
    pass


class PixelFormatError(PipelineError, ValueError):
    pass


class CodecError(PipelineError):
    pass


class DecodeError(CodecError):
    pass


class EncodeError(CodecError):
    pass


class UnsupportedFormatError(CodecError, ValueError):
    def __init__(self, fmt: str, supported=()):
        supported_txt = ", ".join(sorted(supported)) or "none"
        super().__init__(f"Unsupported image format '{fmt}' (supported: {supported_txt})")
        self.format = fmt


class ImageIOError(PipelineError, OSError):
    """Reading or writing an image file failed."""
