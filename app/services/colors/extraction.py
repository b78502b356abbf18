"""
Palette extraction pipeline.

This module wires the palette stages together: decode, downscale, pixel
sampling, median-cut partitioning, vibrancy ranking and conversion into
palette entries. Every call works on its own arrays, so concurrent or
superseded requests never share intermediate state.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from app.config import config
from app.services.imaging import Decoder, decode_image, resize_long_edge
from app.utils.logging import get_logger
from .conversions import (
    contrast_color, hsl_string, rgb_string, rgb_to_hex, rgb_to_hsl
)
from .median_cut import ColorBucket, median_cut
from .ranking import rank_buckets
from .sampling import sample_pixels


@dataclass(frozen=True)
class PaletteEntry:
    """One palette color in every representation a client may display or copy."""
    r: int
    g: int
    b: int
    hex: str
    hsl: Tuple[int, int, int]
    contrast: str
    rgb_string: str
    hsl_string: str

    def to_dict(self) -> Dict[str, Any]:
        h, s, l = self.hsl
        return {
            "r": self.r,
            "g": self.g,
            "b": self.b,
            "hex": self.hex,
            "hsl": {"h": h, "s": s, "l": l},
            "contrast": self.contrast,
            "rgbString": self.rgb_string,
            "hslString": self.hsl_string,
        }


@dataclass
class PaletteResult:
    """Palette plus the bookkeeping gathered while producing it."""
    entries: List[PaletteEntry]
    width: int
    height: int
    sampled_pixels: int
    bucket_count: int
    depth: int
    timings_ms: Dict[str, float] = field(default_factory=dict)


def partition_depth(color_count: int) -> int:
    """
    Median-cut depth for a requested palette size.

    Over-partitions by two extra levels so ranking can choose the most
    significant buckets: 6 colors -> depth 5 -> up to 32 buckets.
    """
    if color_count < 1:
        raise ValueError(f"color_count must be positive, got {color_count}")
    return math.ceil(math.log2(color_count)) + 2


def build_palette_entry(bucket: ColorBucket) -> PaletteEntry:
    """Derive the externally visible palette entry for a bucket."""
    return palette_entry_from_rgb(bucket.r, bucket.g, bucket.b)


def palette_entry_from_rgb(r: int, g: int, b: int) -> PaletteEntry:
    h, s, l = rgb_to_hsl(r, g, b)
    return PaletteEntry(
        r=r,
        g=g,
        b=b,
        hex=rgb_to_hex(r, g, b),
        hsl=(h, s, l),
        contrast=contrast_color(r, g, b),
        rgb_string=rgb_string(r, g, b),
        hsl_string=hsl_string(h, s, l),
    )


def extract_palette_from_pixels(rgba: np.ndarray, color_count: int) -> PaletteResult:
    """
    Run sampling, partitioning, ranking and conversion over an RGBA array.

    Args:
        rgba: ``(H, W, 4)`` or ``(N, 4)`` uint8 array, already downscaled
        color_count: Requested palette size, clamped by the caller to [3, 12]

    Returns:
        PaletteResult with at most ``color_count`` entries

    Raises:
        NoValidPixelsError: If every pixel is filtered out
    """
    timings: Dict[str, float] = {}

    rgba = np.asarray(rgba)
    if rgba.ndim == 3:
        height, width = rgba.shape[:2]
    else:
        width, height = rgba.shape[0], 1

    # Stage 1: sample and filter
    start_time = time.time()
    pixels = sample_pixels(rgba)
    timings["ms_sample"] = (time.time() - start_time) * 1000

    # Stage 2: median cut
    depth = partition_depth(color_count)
    start_time = time.time()
    buckets = median_cut(pixels, depth)
    timings["ms_partition"] = (time.time() - start_time) * 1000

    # Stage 3: rank and convert
    start_time = time.time()
    selected = rank_buckets(buckets, color_count)
    entries = [build_palette_entry(bucket) for bucket in selected]
    timings["ms_rank"] = (time.time() - start_time) * 1000

    get_logger(depth=depth, **timings).debug(
        f"Palette built: {len(pixels)} pixels -> {len(buckets)} buckets -> {len(entries)} colors"
    )

    return PaletteResult(
        entries=entries,
        width=width,
        height=height,
        sampled_pixels=int(pixels.shape[0]),
        bucket_count=len(buckets),
        depth=depth,
        timings_ms=timings,
    )


def extract_palette(image_bytes: bytes,
                    color_count: int,
                    decoder: Decoder = decode_image,
                    max_edge: Optional[int] = None) -> PaletteResult:
    """
    Extract a palette from encoded image bytes.

    Args:
        image_bytes: Encoded image (PNG, JPEG, GIF, WEBP, BMP)
        color_count: Requested palette size, clamped by the caller to [3, 12]
        decoder: Callable turning bytes into a DecodedImage
        max_edge: Longest edge after downscaling (default from config, 250)

    Raises:
        ImageDecodeError: If the bytes cannot be decoded
        NoValidPixelsError: If every pixel is filtered out
    """
    if max_edge is None:
        max_edge = config.MAX_EDGE

    start_time = time.time()
    decoded = decoder(image_bytes)
    rgba = resize_long_edge(decoded.pixels, max_edge)
    ms_decode = (time.time() - start_time) * 1000

    get_logger(ms_decode=ms_decode).debug(
        f"Decoded {decoded.width}x{decoded.height} image, sampling at {rgba.shape[1]}x{rgba.shape[0]}"
    )

    result = extract_palette_from_pixels(rgba, color_count)
    result.timings_ms["ms_decode"] = ms_decode
    return result
