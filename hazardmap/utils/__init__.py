"""
Shared utilities for the hazard map core.
"""

from .color_utils import (
    hex_to_rgb,
    rgb_to_hex,
    parse_color,
    color_distance,
    nearest_color_index,
)

__all__ = [
    'hex_to_rgb',
    'rgb_to_hex',
    'parse_color',
    'color_distance',
    'nearest_color_index',
]
