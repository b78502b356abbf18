"""
Pixel sampling and filtering.

Turns a decoded RGBA buffer into the pixel set consumed by the median-cut
partitioner: opaque pixels of usable brightness, each annotated with its
saturation.
"""

from typing import Optional, Union

import numpy as np
from loguru import logger

from app.config import config
from .errors import NoValidPixelsError

# Column layout of a sampled pixel set
R, G, B, SAT = 0, 1, 2, 3


def pixels_from_buffer(buffer: Union[bytes, bytearray, memoryview], width: int, height: int) -> np.ndarray:
    """
    View a flat RGBA byte buffer (4 bytes per pixel, row-major) as an image array.

    Raises:
        ValueError: If the buffer length does not match the dimensions
    """
    data = np.frombuffer(bytes(buffer), dtype=np.uint8)
    expected = width * height * 4
    if data.size != expected:
        raise ValueError(
            f"RGBA buffer size mismatch: got {data.size} bytes, expected {expected} "
            f"for {width}x{height}"
        )
    return data.reshape(height, width, 4)


def sample_pixels(rgba: np.ndarray,
                  alpha_threshold: Optional[int] = None,
                  min_brightness: Optional[float] = None,
                  max_brightness: Optional[float] = None) -> np.ndarray:
    """
    Filter an RGBA image down to the pixels worth clustering.

    A pixel is dropped when its alpha is below ``alpha_threshold`` or when its
    brightness ``(r + g + b) / 3`` falls outside ``[min_brightness, max_brightness]``.
    Both brightness bounds are inclusive.

    Args:
        rgba: ``(H, W, 4)`` or ``(N, 4)`` uint8 array
        alpha_threshold: Minimum alpha kept (default from config, 128)
        min_brightness: Lowest brightness kept (default from config, 5)
        max_brightness: Highest brightness kept (default from config, 250)

    Returns:
        ``(N, 4)`` float64 array with columns r, g, b, saturation, in row-major
        source order

    Raises:
        ValueError: If the array is not RGBA shaped
        NoValidPixelsError: If no pixel survives filtering
    """
    if alpha_threshold is None:
        alpha_threshold = config.ALPHA_THRESHOLD
    if min_brightness is None:
        min_brightness = config.MIN_BRIGHTNESS
    if max_brightness is None:
        max_brightness = config.MAX_BRIGHTNESS

    data = np.asarray(rgba)
    if data.ndim == 3:
        data = data.reshape(-1, data.shape[-1])
    if data.ndim != 2 or data.shape[1] != 4:
        raise ValueError(f"Expected RGBA pixel data with 4 channels, got shape {np.shape(rgba)}")

    # Widen before summing so uint8 channels cannot overflow
    channels = data.astype(np.int64)
    r, g, b, alpha = channels[:, 0], channels[:, 1], channels[:, 2], channels[:, 3]

    brightness = (r + g + b) / 3.0
    keep = (alpha >= alpha_threshold) & (brightness >= min_brightness) & (brightness <= max_brightness)

    kept = channels[keep, :3]
    logger.debug(f"Pixel filter: kept {kept.shape[0]}/{data.shape[0]} pixels")

    if kept.shape[0] == 0:
        raise NoValidPixelsError()

    c_max = kept.max(axis=1)
    c_min = kept.min(axis=1)
    sat = np.zeros(kept.shape[0], dtype=np.float64)
    nonzero = c_max > 0
    sat[nonzero] = (c_max[nonzero] - c_min[nonzero]) / c_max[nonzero]

    return np.column_stack([kept.astype(np.float64), sat])
