"""
Hazard raster classification: tile math, pixel sampling and legend matching.
"""

from .tiles import TileBounds, TileIndex, WebMercatorTiles, round_zoom
from .sampler import HttpTilePixelSampler, TilePixelSampler, decode_pixel
from .classifier import (
    HazardClassification,
    PixelClassifier,
    TileLocation,
    classify_pixel,
    locate_pixel,
    nearest_legend_entry,
)

__all__ = [
    "TileBounds",
    "TileIndex",
    "WebMercatorTiles",
    "round_zoom",
    "HttpTilePixelSampler",
    "TilePixelSampler",
    "decode_pixel",
    "HazardClassification",
    "PixelClassifier",
    "TileLocation",
    "classify_pixel",
    "locate_pixel",
    "nearest_legend_entry",
]
