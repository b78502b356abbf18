"""
Palette extraction error types.

Both failures are deterministic for a given input, so callers surface them
as-is and never retry.
"""


class PaletteError(Exception):
    """Base class for palette extraction failures."""

    error_type = "palette_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ImageDecodeError(PaletteError):
    """The source image could not be read or decoded."""

    error_type = "image_decode_failed"

    def __init__(self, message: str = "Failed to load image"):
        super().__init__(message)


class NoValidPixelsError(PaletteError):
    """Every pixel was removed by the transparency and brightness filters."""

    error_type = "no_valid_pixels"

    def __init__(self, message: str = "No valid pixels found in image"):
        super().__init__(message)
