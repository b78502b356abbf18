"""
Color-space conversion utilities.

Pure numeric transforms between RGB, hex and HSL, plus the luminance-based
contrast text color. All rounding goes through ``round_half_up`` so that x.5
values behave the same in every conversion.
"""

import math
import re
from typing import Tuple

BLACK = "#000000"
WHITE = "#ffffff"
CONTRAST_COLORS = (BLACK, WHITE)

COLOR_FORMATS = ("hex", "rgb", "hsl")

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up."""
    return int(math.floor(value + 0.5))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB channels to a lowercase ``#rrggbb`` string."""
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """
    Convert a hex color string to an RGB tuple.

    Accepts ``#rrggbb``, ``rrggbb`` and the short ``#rgb`` form, in any case.

    Raises:
        ValueError: If the string is not a valid hex color
    """
    match = _HEX_RE.match(hex_color.strip())
    if not match:
        raise ValueError(f"Invalid hex color: {hex_color!r}")

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))


def rgb_to_hsl_exact(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """Unrounded RGB to HSL: hue degrees [0, 360), saturation and lightness percent."""
    rf, gf, bf = r / 255.0, g / 255.0, b / 255.0

    c_max = max(rf, gf, bf)
    c_min = min(rf, gf, bf)
    lightness = (c_max + c_min) / 2

    if c_max == c_min:
        hue = sat = 0.0
    else:
        delta = c_max - c_min
        if lightness > 0.5:
            sat = delta / (2 - c_max - c_min)
        else:
            sat = delta / (c_max + c_min)

        if c_max == rf:
            hue = ((gf - bf) / delta + (6 if gf < bf else 0)) / 6
        elif c_max == gf:
            hue = ((bf - rf) / delta + 2) / 6
        else:
            hue = ((rf - gf) / delta + 4) / 6

    return hue * 360, sat * 100, lightness * 100


def rgb_to_hsl(r: int, g: int, b: int) -> Tuple[int, int, int]:
    """
    Convert RGB (0-255) to HSL.

    Returns:
        Tuple of (hue degrees 0-359, saturation percent 0-100, lightness percent 0-100),
        each rounded to the nearest integer. Achromatic colors get hue and
        saturation of 0.
    """
    hue, sat, lightness = rgb_to_hsl_exact(r, g, b)

    # A hue just below 360 rounds up to 360, which is the same angle as 0
    return (
        round_half_up(hue) % 360,
        round_half_up(sat),
        round_half_up(lightness),
    )


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """
    Convert HSL (hue degrees, saturation and lightness percent) to RGB (0-255).

    Exact inverse of ``rgb_to_hsl_exact``. Feeding it the integer output of
    ``rgb_to_hsl`` only approximates the original channels.
    """
    hue = (h % 360) / 360.0
    sat = s / 100.0
    light = l / 100.0

    if sat == 0:
        value = round_half_up(light * 255)
        return value, value, value

    q = light * (1 + sat) if light < 0.5 else light + sat - light * sat
    p = 2 * light - q

    return (
        round_half_up(_hue_to_channel(p, q, hue + 1 / 3) * 255),
        round_half_up(_hue_to_channel(p, q, hue) * 255),
        round_half_up(_hue_to_channel(p, q, hue - 1 / 3) * 255),
    )


def saturation(r: int, g: int, b: int) -> float:
    """HSV-style saturation ``(max - min) / max``, or 0 for black."""
    c_max = max(r, g, b)
    if c_max == 0:
        return 0.0
    return (c_max - min(r, g, b)) / c_max


def relative_luminance(r: int, g: int, b: int) -> float:
    """Perceived brightness in [0, 1] using ITU-R BT.601 weights."""
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def contrast_color(r: int, g: int, b: int) -> str:
    """Pick black or white text for readability on the given background."""
    return BLACK if relative_luminance(r, g, b) > 0.5 else WHITE


def rgb_string(r: int, g: int, b: int) -> str:
    """CSS ``rgb()`` notation."""
    return f"rgb({r}, {g}, {b})"


def hsl_string(h: int, s: int, l: int) -> str:
    """CSS ``hsl()`` notation."""
    return f"hsl({h}, {s}%, {l}%)"


def format_color(entry, fmt: str = "hex") -> str:
    """
    Render a palette entry in one of the copyable formats.

    Args:
        entry: Anything with ``hex``, ``rgb_string`` and ``hsl_string`` attributes
        fmt: One of ``hex``, ``rgb``, ``hsl``

    Raises:
        ValueError: For an unknown format
    """
    if fmt == "hex":
        return entry.hex
    if fmt == "rgb":
        return entry.rgb_string
    if fmt == "hsl":
        return entry.hsl_string
    raise ValueError(f"Unknown color format: {fmt!r}. Supported: {', '.join(COLOR_FORMATS)}")
