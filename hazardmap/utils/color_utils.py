"""
Color utilities for legend matching.

Parses the color notations used in legend documents and measures distances
between colors. All functions work with (red, green, blue) tuples of ints in
0-255.
"""

import re
from typing import Sequence, Tuple

import numpy as np

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r'^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$')
_FUNC_RE = re.compile(r'^rgba?\(\s*([^)]*)\)$', re.IGNORECASE)


# =============================================================================
# Color Conversion Functions
# =============================================================================

def hex_to_rgb(hex_color: str) -> RGB:
    """
    Convert hex color to RGB tuple.

    Accepts #RGB, #RRGGBB and #RRGGBBAA (alpha is dropped).

    Args:
        hex_color: Hex color string, with or without the # prefix

    Returns:
        Tuple of (red, green, blue) values (0-255)

    Examples:
        >>> hex_to_rgb("#F7F5A9")
        (247, 245, 169)
        >>> hex_to_rgb("f00")
        (255, 0, 0)
    """
    match = _HEX_RE.match(hex_color.strip())
    if not match:
        raise ValueError(f"Invalid hex color format: {hex_color}")

    digits = match.group(1)
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)

    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """
    Convert RGB to hex string.

    Examples:
        >>> rgb_to_hex(247, 245, 169)
        '#F7F5A9'
    """
    r = max(0, min(255, r))
    g = max(0, min(255, g))
    b = max(0, min(255, b))

    return f'#{r:02X}{g:02X}{b:02X}'


def parse_color(color: str) -> RGB:
    """
    Parse a CSS-style color string into an RGB tuple.

    Supports hex notation and ``rgb(r, g, b)`` / ``rgba(r, g, b, a)``
    functional notation. Alpha is ignored: legend matching compares opaque
    colors only.

    Raises:
        ValueError: If the string is not a recognised color
    """
    text = color.strip()
    func = _FUNC_RE.match(text)
    if func is None:
        return hex_to_rgb(text)

    parts = [p.strip() for p in func.group(1).split(',')]
    if len(parts) not in (3, 4):
        raise ValueError(f"Invalid color function: {color}")
    try:
        channels = [int(round(float(p))) for p in parts[:3]]
    except ValueError as e:
        raise ValueError(f"Invalid color function: {color}") from e
    if any(c < 0 or c > 255 for c in channels):
        raise ValueError(f"Color channel out of range: {color}")
    return (channels[0], channels[1], channels[2])


# =============================================================================
# Distance Functions
# =============================================================================

def color_distance(a: Sequence[int], b: Sequence[int]) -> float:
    """Euclidean distance between two RGB colors."""
    return float(np.linalg.norm(np.asarray(a[:3], dtype=float) - np.asarray(b[:3], dtype=float)))


def nearest_color_index(target: Sequence[int], palette: Sequence[Sequence[int]]) -> int:
    """
    Index of the palette color closest to ``target``.

    Ties resolve to the first listed color.

    Raises:
        ValueError: If the palette is empty
    """
    if len(palette) == 0:
        raise ValueError("Palette is empty")
    colors = np.asarray([c[:3] for c in palette], dtype=float)
    distances = np.linalg.norm(colors - np.asarray(target[:3], dtype=float), axis=1)
    return int(np.argmin(distances))
