"""
Unit tests for median-cut partitioning.

Tests split-channel selection, bucket averaging, deterministic partition
order and the termination rules.
"""

import numpy as np
import pytest

from app.services.colors.median_cut import (
    ColorBucket, channel_ranges, median_cut, select_split_channel, summarize_bucket
)
from app.services.colors.sampling import B, G, R, sample_pixels
from conftest import make_rgba


def _pixels(colors, sat=0.0):
    """Build an (N, 4) pixel set with a constant saturation column."""
    return np.array([list(color) + [sat] for color in colors], dtype=np.float64)


class TestSplitChannel:
    """Test choice of the channel to bisect"""

    def test_widest_channel_wins(self):
        assert select_split_channel(10, 50, 20) == G
        assert select_split_channel(10, 5, 90) == B
        assert select_split_channel(100, 5, 90) == R

    def test_ties_prefer_red_then_green(self):
        assert select_split_channel(40, 40, 40) == R
        assert select_split_channel(10, 40, 40) == G
        assert select_split_channel(40, 10, 40) == R

    def test_channel_ranges(self):
        pixels = _pixels([(10, 200, 0), (60, 100, 0), (30, 150, 0)])
        assert channel_ranges(pixels) == (50, 100, 0)


class TestSummarizeBucket:
    """Test bucket averaging"""

    def test_mean_rounds_half_up(self):
        """Channel mean 1.5 becomes 2"""
        bucket = summarize_bucket(_pixels([(1, 1, 1), (2, 2, 2)]))
        assert (bucket.r, bucket.g, bucket.b) == (2, 2, 2)
        assert bucket.count == 2

    def test_mean_saturation(self):
        pixels = np.array([[255, 0, 0, 1.0], [128, 128, 128, 0.0]])
        bucket = summarize_bucket(pixels)
        assert bucket.saturation == pytest.approx(0.5)
        assert (bucket.r, bucket.g, bucket.b) == (192, 64, 64)


class TestMedianCut:
    """Test the recursive partitioner"""

    def test_red_and_blue_split_blue_first(self):
        """Red is the split channel; blue has the lower red value"""
        buckets = median_cut(_pixels([(255, 0, 0), (0, 0, 255)], sat=1.0), depth=4)
        assert buckets == [
            ColorBucket(r=0, g=0, b=255, saturation=1.0, count=1),
            ColorBucket(r=255, g=0, b=0, saturation=1.0, count=1),
        ]

    def test_single_color_yields_one_bucket(self):
        """A uniform set stops splitting and reproduces its color"""
        buckets = median_cut(_pixels([(128, 128, 128)] * 50), depth=5)
        assert len(buckets) == 1
        assert (buckets[0].r, buckets[0].g, buckets[0].b) == (128, 128, 128)
        assert buckets[0].count == 50

    def test_empty_input(self):
        assert median_cut(np.empty((0, 4)), depth=3) == []

    def test_depth_zero_is_one_bucket(self):
        buckets = median_cut(_pixels([(0, 0, 10), (100, 50, 200)]), depth=0)
        assert len(buckets) == 1
        assert buckets[0].count == 2
        assert (buckets[0].r, buckets[0].g, buckets[0].b) == (50, 25, 105)

    def test_odd_count_puts_extra_pixel_in_upper_half(self):
        buckets = median_cut(_pixels([(10, 0, 0), (20, 0, 0), (30, 0, 0)]), depth=1)
        assert [bucket.count for bucket in buckets] == [1, 2]
        assert buckets[1].r == 25

    def test_tied_ranges_split_on_red(self):
        """Equal red and green ranges bisect on red"""
        pixels = _pixels([(0, 10, 0), (10, 0, 0), (5, 5, 0)])
        buckets = median_cut(pixels, depth=1)
        assert (buckets[0].r, buckets[0].g, buckets[0].b) == (0, 10, 0)
        assert buckets[1].count == 2

    def test_equal_keys_keep_input_order(self):
        """The median sort is stable, so equal channel values keep their order"""
        pixels = _pixels([(50, 1, 0), (50, 9, 0), (0, 5, 0), (100, 5, 0)])
        buckets = median_cut(pixels, depth=1)
        # Sorted on red: (0,5), (50,1), (50,9), (100,5)
        assert (buckets[0].r, buckets[0].g) == (25, 3)
        assert (buckets[1].r, buckets[1].g) == (75, 7)

    def test_bucket_limits_and_counts(self):
        rng = np.random.default_rng(7)
        colors = rng.integers(0, 256, size=(1000, 3))
        pixels = sample_pixels(make_rgba([tuple(c) for c in colors]))
        for depth in (1, 3, 5):
            buckets = median_cut(pixels, depth)
            assert 1 <= len(buckets) <= 2 ** depth
            assert all(bucket.count >= 1 for bucket in buckets)
            assert sum(bucket.count for bucket in buckets) == pixels.shape[0]

    def test_deterministic(self):
        rng = np.random.default_rng(11)
        pixels = _pixels(rng.integers(0, 256, size=(500, 3)), sat=0.3)
        assert median_cut(pixels, 5) == median_cut(pixels.copy(), 5)

    def test_input_not_modified(self):
        pixels = _pixels([(200, 10, 10), (10, 200, 10), (10, 10, 200), (90, 90, 90)])
        before = pixels.copy()
        median_cut(pixels, 3)
        np.testing.assert_array_equal(pixels, before)

    def test_rgb_only_input(self):
        """Three-column input is treated as unsaturated"""
        buckets = median_cut(np.array([[255, 0, 0], [0, 0, 255]]), depth=2)
        assert all(bucket.saturation == 0.0 for bucket in buckets)

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            median_cut(np.zeros((4, 5)), depth=2)

    def test_uniform_sub_partition_stops_early(self):
        """Uniform halves of a mixed set are not split down to full depth"""
        pixels = _pixels([(120, 120, 120)] * 6 + [(230, 40, 40)] * 2)
        buckets = median_cut(pixels, depth=4)
        assert [bucket.count for bucket in buckets] == [4, 2, 2]
        assert [(bucket.r, bucket.g, bucket.b) for bucket in buckets] == [
            (120, 120, 120), (120, 120, 120), (230, 40, 40)
        ]
