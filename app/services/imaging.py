"""
Palette Service Imaging Utilities
Handles upload validation, image decoding and downscaling.

Decoding is kept behind a plain ``bytes -> DecodedImage`` callable so the
extraction core can be driven from in-memory fixtures.
"""
import io
from dataclasses import dataclass
from typing import Callable, Tuple

import cv2
import numpy as np
from fastapi import HTTPException, UploadFile
from PIL import Image

from app.config import config
from app.services.colors.conversions import round_half_up
from app.services.colors.errors import ImageDecodeError

_MAGIC_BYTES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


@dataclass(frozen=True)
class DecodedImage:
    """A decoded image as an ``(height, width, 4)`` uint8 RGBA array."""
    width: int
    height: int
    pixels: np.ndarray


Decoder = Callable[[bytes], DecodedImage]


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file metadata for format compliance.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 400 for oversized files, 415 for unsupported formats
    """
    # file.size might be None for some clients
    if file.size and file.size > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    if file.filename and "." in file.filename:
        ext = "." + file.filename.lower().rsplit(".", 1)[-1]
        if ext not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Validate file magic bytes to ensure it's actually an image.

    Returns:
        Detected MIME type

    Raises:
        ImageDecodeError: For empty, truncated or unrecognised data
    """
    if len(file_bytes) < 8:
        raise ImageDecodeError("Failed to load image: file too small or corrupt")

    for signature, mime_type in _MAGIC_BYTES:
        if file_bytes.startswith(signature):
            return mime_type

    if file_bytes[:4] == b"RIFF" and file_bytes[8:12] == b"WEBP":
        return "image/webp"

    raise ImageDecodeError("Failed to load image: unrecognised image format")


async def read_upload(file: UploadFile) -> bytes:
    """
    Read an uploaded image into memory after validating it.

    Raises:
        HTTPException: 400 for read errors or oversized files, 415 for unsupported formats
    """
    validate_file_upload(file)

    try:
        file_bytes = await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    # Validate file size after reading
    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    return file_bytes


def decode_image(file_bytes: bytes) -> DecodedImage:
    """
    Decode image bytes to an RGBA array.

    Images without an alpha channel decode as fully opaque.

    Raises:
        ImageDecodeError: If the bytes are not a readable image
    """
    validate_magic_bytes(file_bytes)

    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        pil_image.load()
        if pil_image.mode.startswith("I"):
            # 16/32-bit grayscale: convert() clips to 255, so rescale to 8 bits first
            wide = np.clip(np.asarray(pil_image, dtype=np.int64), 0, 65535) >> 8
            pil_image = Image.fromarray(wide.astype(np.uint8))
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")
        rgba = np.array(pil_image, dtype=np.uint8)
    except Exception as e:
        raise ImageDecodeError(f"Failed to load image: {str(e)}")

    height, width = rgba.shape[:2]
    if width == 0 or height == 0:
        raise ImageDecodeError("Failed to load image: empty image")

    return DecodedImage(width=width, height=height, pixels=rgba)


def downscale_dimensions(width: int, height: int, max_edge: int = None) -> Tuple[int, int]:
    """
    Compute dimensions whose longer edge is at most ``max_edge``.

    Aspect ratio is preserved; the shorter edge is rounded half-up and never
    drops below one pixel. Images already within bounds keep their size.
    """
    if max_edge is None:
        max_edge = config.MAX_EDGE

    if width > height:
        if width > max_edge:
            height = max(1, round_half_up(height * max_edge / width))
            width = max_edge
    elif height > max_edge:
        width = max(1, round_half_up(width * max_edge / height))
        height = max_edge

    return width, height


def resize_long_edge(rgba: np.ndarray, max_edge: int = None) -> np.ndarray:
    """
    Resize an RGBA image so the longest edge is at most max_edge pixels.

    Color is averaged with premultiplied alpha, so transparent pixels never
    darken the edges of opaque regions.

    Args:
        rgba: Input image as (H, W, 4) array
        max_edge: Maximum edge size (default from config)

    Returns:
        Resized image, or the input unchanged when already small enough
    """
    height, width = rgba.shape[:2]
    new_width, new_height = downscale_dimensions(width, height, max_edge)

    if (new_width, new_height) == (width, height):
        return rgba

    premultiplied = rgba.astype(np.float32)
    premultiplied[..., :3] *= premultiplied[..., 3:4] / 255.0

    # Use INTER_AREA for downscaling (better quality)
    resized = cv2.resize(premultiplied, (new_width, new_height), interpolation=cv2.INTER_AREA)

    alpha = resized[..., 3:4]
    rgb = np.zeros_like(resized[..., :3])
    np.divide(resized[..., :3] * 255.0, alpha, out=rgb, where=alpha > 0)

    out = np.concatenate([rgb, alpha], axis=2)
    return np.clip(np.floor(out + 0.5), 0, 255).astype(np.uint8)

