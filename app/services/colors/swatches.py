"""
Swatch Rendering Module

Renders a palette as a horizontal strip of color chips for quick visual QA.
Each chip is labelled with its hex code in the entry's contrast color.
"""

import base64
from typing import Sequence, Tuple

import cv2
import numpy as np
from loguru import logger

from app.config import config
from .conversions import hex_to_rgb


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to BGR tuple for OpenCV."""
    r, g, b = hex_to_rgb(hex_color)
    return (b, g, r)


def validate_swatch_params(count: int, chip_size: int) -> None:
    """Validate swatch rendering parameters."""
    if count <= 0:
        raise ValueError("Cannot render a swatch for an empty palette")

    if not config.validate_chip_size(chip_size):
        raise ValueError("chip_size must be between 8 and 256")



def render_swatch_strip(entries: Sequence,
                        chip_size: int = 64,
                        show_labels: bool = True,
                        font_scale: float = 0.35) -> str:
    """
    Render a horizontal strip of color swatches.

    Args:
        entries: Palette entries with ``hex`` and ``contrast`` attributes
        chip_size: Size of each color chip in pixels
        show_labels: Whether to draw the hex code on each chip
        font_scale: OpenCV font scale for labels

    Returns:
        Base64-encoded PNG image string
    """
    validate_swatch_params(len(entries), chip_size)

    k = len(entries)
    logger.debug(f"Rendering swatch strip with {k} colors, chip_size={chip_size}")

    img = np.zeros((chip_size, chip_size * k, 3), dtype=np.uint8)

    for i, entry in enumerate(entries):
        x_start = i * chip_size
        x_end = x_start + chip_size
        img[:, x_start:x_end, :] = hex_to_bgr(entry.hex)

        if show_labels:
            label = entry.hex.lstrip("#")
            text_color = hex_to_bgr(entry.contrast)
            text_w, text_h = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, font_scale, 1)[0]
            text_x = x_start + max(0, (chip_size - text_w) // 2)
            text_y = (chip_size + text_h) // 2
            cv2.putText(img, label, (text_x, text_y),
                        cv2.FONT_HERSHEY_SIMPLEX, font_scale, text_color, 1, cv2.LINE_AA)

    success, buffer = cv2.imencode(".png", img)
    if not success:
        raise RuntimeError("Failed to encode swatch strip as PNG")

    b64_string = base64.b64encode(buffer.tobytes()).decode("ascii")
    logger.debug(f"Encoded swatch strip: {img.shape[1]}x{img.shape[0]} -> {len(b64_string)} chars")

    return b64_string
