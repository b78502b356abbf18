"""
Median-cut color partitioning.

Recursively bisects a pixel set along the channel with the widest value range,
splitting at the median, and summarizes every leaf as a ``ColorBucket``.
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .conversions import round_half_up
from .sampling import R, G, B, SAT

CHANNEL_NAMES = ("red", "green", "blue")


@dataclass(frozen=True)
class ColorBucket:
    """Average color of one leaf partition and how many pixels it holds."""
    r: int
    g: int
    b: int
    saturation: float
    count: int


def channel_ranges(pixels: np.ndarray) -> Tuple[int, int, int]:
    """Return ``max - min`` of the r, g and b columns."""
    spans = np.ptp(pixels[:, :3], axis=0)
    return int(spans[R]), int(spans[G]), int(spans[B])


def select_split_channel(r_range: int, g_range: int, b_range: int) -> int:
    """
    Pick the channel with the greatest range.

    Ties resolve to red, then green, then blue.
    """
    if r_range >= g_range and r_range >= b_range:
        return R
    elif g_range >= r_range and g_range >= b_range:
        return G
    return B


def summarize_bucket(pixels: np.ndarray) -> ColorBucket:
    """Collapse a non-empty partition into its rounded mean color."""
    count = int(pixels.shape[0])
    totals = pixels[:, :3].sum(axis=0)
    return ColorBucket(
        r=round_half_up(totals[R] / count),
        g=round_half_up(totals[G] / count),
        b=round_half_up(totals[B] / count),
        saturation=float(pixels[:, SAT].sum() / count),
        count=count,
    )


def median_cut(pixels: np.ndarray, depth: int) -> List[ColorBucket]:
    """
    Partition a sampled pixel set into up to ``2 ** depth`` color buckets.

    Args:
        pixels: ``(N, 4)`` array of r, g, b, saturation rows. ``(N, 3)`` input
            is accepted and treated as fully desaturated.
        depth: Number of bisection levels

    Returns:
        Buckets in partition order, lower halves before upper halves. Empty
        partitions produce nothing. The input array is never modified.

    Unlike a plain median cut, a partition whose pixels all share one color is
    not split further, even above depth 0. A single-color image therefore gives
    exactly one bucket instead of ``2 ** depth`` duplicates, and uniform regions
    inside mixed images give one larger bucket where a full-depth cut would
    give several smaller identical ones.
    """
    data = np.asarray(pixels, dtype=np.float64)
    if data.ndim != 2 or data.shape[1] not in (3, 4):
        raise ValueError(f"Expected (N, 3) or (N, 4) pixel array, got shape {data.shape}")
    if data.shape[1] == 3:
        data = np.column_stack([data, np.zeros(data.shape[0])])

    return _partition(data, depth)


def _partition(pixels: np.ndarray, depth: int) -> List[ColorBucket]:
    count = pixels.shape[0]
    if count == 0:
        return []
    if depth <= 0:
        return [summarize_bucket(pixels)]

    ranges = channel_ranges(pixels)
    if not any(ranges):
        # Every pixel is the same color; further splits only duplicate it
        return [summarize_bucket(pixels)]

    channel = select_split_channel(*ranges)
    ordered = pixels[np.argsort(pixels[:, channel], kind="stable")]

    mid = count // 2
    return _partition(ordered[:mid], depth - 1) + _partition(ordered[mid:], depth - 1)
