"""
Bucket ranking and selection.

Orders median-cut buckets by pixel count weighted by vibrancy, so that a small
but strongly saturated region can outrank a large dull one.
"""

from typing import List, Sequence

from .median_cut import ColorBucket

SATURATION_WEIGHT = 2.0


def vibrancy_score(bucket: ColorBucket) -> float:
    """Score a bucket as ``count * (1 + saturation * 2)``."""
    return bucket.count * (1 + bucket.saturation * SATURATION_WEIGHT)


def rank_buckets(buckets: Sequence[ColorBucket], color_count: int) -> List[ColorBucket]:
    """
    Sort buckets by descending vibrancy score and keep the top ``color_count``.

    The sort is stable: buckets with equal scores stay in partition order.
    Near-duplicate colors are not merged.
    """
    ranked = sorted(buckets, key=vibrancy_score, reverse=True)
    return ranked[:max(color_count, 0)]
