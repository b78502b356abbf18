"""
Unit tests for color-space conversions.

Covers hex/RGB/HSL transforms, the shared rounding rule and the binary
contrast color choice.
"""

import re

import pytest

from app.services.colors.conversions import (
    BLACK, WHITE, contrast_color, format_color, hex_to_rgb, hsl_string, hsl_to_rgb,
    relative_luminance, rgb_string, rgb_to_hex, rgb_to_hsl, rgb_to_hsl_exact, round_half_up,
    saturation
)
from app.services.colors.extraction import palette_entry_from_rgb

HEX_RE = re.compile(r"^#[0-9a-f]{6}$")


class TestRoundHalfUp:
    """Test the single rounding rule used across the pipeline"""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1), (1.5, 2), (2.5, 3), (127.5, 128), (254.5, 255),
        (1.49, 1), (1.51, 2), (0.0, 0), (3.0, 3),
    ])
    def test_half_values_round_up(self, value, expected):
        """x.5 always rounds up, unlike Python's banker's rounding"""
        assert round_half_up(value) == expected

    def test_differs_from_builtin_round(self):
        """Builtin round(2.5) == 2; ours must give 3"""
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3


class TestRgbToHex:
    """Test RGB to hex conversion"""

    def test_basic_colors(self):
        """Test conversion of basic RGB colors to lowercase hex"""
        assert rgb_to_hex(255, 0, 0) == "#ff0000"
        assert rgb_to_hex(0, 255, 0) == "#00ff00"
        assert rgb_to_hex(0, 0, 255) == "#0000ff"
        assert rgb_to_hex(0, 0, 0) == "#000000"
        assert rgb_to_hex(255, 255, 255) == "#ffffff"

    def test_zero_padding(self):
        """Single-digit channels are zero padded"""
        assert rgb_to_hex(1, 2, 10) == "#01020a"

    def test_always_matches_pattern(self):
        """Every channel combination yields #rrggbb in lowercase"""
        for value in (0, 9, 15, 16, 128, 171, 255):
            assert HEX_RE.match(rgb_to_hex(value, 255 - value, value // 2))


class TestHexToRgb:
    """Test hex parsing"""

    def test_round_trip_with_rgb_to_hex(self):
        """Parsing a formatted hex recovers the channels"""
        assert hex_to_rgb(rgb_to_hex(31, 78, 121)) == (31, 78, 121)

    def test_accepts_variants(self):
        """Upper case, missing hash and short form are accepted"""
        assert hex_to_rgb("#D3B58F") == (211, 181, 143)
        assert hex_to_rgb("d3b58f") == (211, 181, 143)
        assert hex_to_rgb("#f0a") == (255, 0, 170)

    @pytest.mark.parametrize("bad", ["", "#12345", "#gggggg", "rgb(1,2,3)", "#1234567"])
    def test_rejects_invalid(self, bad):
        """Malformed strings raise ValueError"""
        with pytest.raises(ValueError):
            hex_to_rgb(bad)


class TestRgbToHsl:
    """Test RGB to HSL conversion"""

    def test_primaries(self):
        """Primary colors land on 0/120/240 degrees"""
        assert rgb_to_hsl(255, 0, 0) == (0, 100, 50)
        assert rgb_to_hsl(0, 255, 0) == (120, 100, 50)
        assert rgb_to_hsl(0, 0, 255) == (240, 100, 50)

    def test_achromatic(self):
        """Grays have zero hue and saturation"""
        assert rgb_to_hsl(0, 0, 0) == (0, 0, 0)
        assert rgb_to_hsl(128, 128, 128) == (0, 0, 50)
        assert rgb_to_hsl(255, 255, 255) == (0, 0, 100)

    def test_known_color(self):
        """A mid-tone color matches the standard transform"""
        assert rgb_to_hsl(30, 90, 200) == (219, 74, 45)

    def test_hue_never_reaches_360(self):
        """A hue that rounds to 360 wraps to 0"""
        h, _, _ = rgb_to_hsl(255, 0, 1)
        assert 0 <= h < 360

    def test_ranges(self):
        """Components stay inside their documented ranges"""
        for r, g, b in [(12, 200, 77), (250, 249, 1), (1, 2, 3), (200, 10, 250)]:
            h, s, l = rgb_to_hsl(r, g, b)
            assert 0 <= h < 360
            assert 0 <= s <= 100
            assert 0 <= l <= 100


class TestHslRoundTrip:
    """RGB -> HSL -> RGB reproduces the input within rounding tolerance"""

    @pytest.mark.parametrize("rgb", [
        (255, 0, 0), (0, 0, 255), (128, 128, 128), (30, 90, 200), (230, 40, 40),
        (250, 210, 20), (10, 42, 67), (211, 181, 143), (45, 117, 96), (120, 121, 119),
    ])
    def test_round_trip(self, rgb):
        """Unrounded HSL converts back to within one unit per channel"""
        back = hsl_to_rgb(*rgb_to_hsl_exact(*rgb))
        for original, recovered in zip(rgb, back):
            assert abs(original - recovered) <= 1

    def test_round_trip_every_gray_and_primary_ramp(self):
        """Sweep ramps across each channel"""
        for value in range(0, 256, 5):
            for rgb in [(value, value, value), (value, 0, 0), (0, value, 0), (0, 0, value)]:
                back = hsl_to_rgb(*rgb_to_hsl_exact(*rgb))
                assert all(abs(a - b) <= 1 for a, b in zip(rgb, back))

    def test_exact_for_primaries_and_grays(self):
        """Colors representable exactly in integer HSL survive unchanged"""
        for rgb in [(255, 0, 0), (0, 255, 0), (0, 0, 255), (0, 0, 0), (255, 255, 255)]:
            assert hsl_to_rgb(*rgb_to_hsl(*rgb)) == rgb


class TestSaturation:
    """Test HSV-style saturation used for vibrancy weighting"""

    def test_values(self):
        assert saturation(255, 0, 0) == 1.0
        assert saturation(128, 128, 128) == 0.0
        assert saturation(0, 0, 0) == 0.0
        assert saturation(200, 100, 100) == pytest.approx(0.5)


class TestContrastColor:
    """Test binary contrast color selection"""

    def test_light_backgrounds_get_black(self):
        assert contrast_color(255, 255, 255) == BLACK
        assert contrast_color(250, 210, 20) == BLACK

    def test_dark_backgrounds_get_white(self):
        assert contrast_color(0, 0, 0) == WHITE
        assert contrast_color(30, 90, 200) == WHITE

    def test_threshold_is_strict(self):
        """Gray 128 sits just above the 0.5 luminance threshold, gray 127 just below"""
        assert relative_luminance(128, 128, 128) > 0.5
        assert contrast_color(128, 128, 128) == BLACK
        assert contrast_color(127, 127, 127) == WHITE

    def test_only_two_values(self):
        """No input ever produces a third color"""
        seen = {contrast_color(r, g, b)
                for r in range(0, 256, 17) for g in range(0, 256, 17) for b in range(0, 256, 51)}
        assert seen == {BLACK, WHITE}


class TestFormatting:
    """Test CSS notations and copy formats"""

    def test_strings(self):
        assert rgb_string(1, 2, 3) == "rgb(1, 2, 3)"
        assert hsl_string(219, 74, 45) == "hsl(219, 74%, 45%)"

    def test_format_color(self):
        entry = palette_entry_from_rgb(30, 90, 200)
        assert format_color(entry, "hex") == "#1e5ac8"
        assert format_color(entry, "rgb") == "rgb(30, 90, 200)"
        assert format_color(entry, "hsl") == "hsl(219, 74%, 45%)"

    def test_format_color_unknown(self):
        entry = palette_entry_from_rgb(0, 0, 0)
        with pytest.raises(ValueError):
            format_color(entry, "cmyk")
