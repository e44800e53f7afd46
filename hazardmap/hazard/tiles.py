"""
Slippy-map tile math.

Locates the XYZ tile under a geographic point, the tile's geographic bounds,
and the pixel inside the tile image that a point falls on. Tiles follow the
standard web mercator scheme: origin at the top-left, row 0 at the north
edge.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileBounds:
    """
    Geographic bounds of a tile in EPSG:4326.

    Attributes:
        minx: West longitude
        miny: South latitude
        maxx: East longitude
        maxy: North latitude
    """

    minx: float
    miny: float
    maxx: float
    maxy: float

    @property
    def width(self) -> float:
        return self.maxx - self.minx

    @property
    def height(self) -> float:
        return self.maxy - self.miny

    def contains(self, lng: float, lat: float) -> bool:
        return self.minx <= lng <= self.maxx and self.miny <= lat <= self.maxy


@dataclass(frozen=True)
class TileIndex:
    """
    Address of a tile.

    Attributes:
        x: Column
        y: Row (0 = north)
        z: Zoom level
    """

    x: int
    y: int
    z: int

    def to_tuple(self) -> Tuple[int, int, int]:
        """Return as tuple (x, y, z)."""
        return (self.x, self.y, self.z)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "z": self.z}


class WebMercatorTiles:
    """
    Web Mercator (EPSG:3857) tile calculations.

    Implements standard XYZ tile scheme used by web maps.
    """

    MAX_LATITUDE = 85.051128779806589

    @classmethod
    def latlng_to_tile(cls, lat: float, lng: float, zoom: int) -> TileIndex:
        """
        Convert lat/lng to tile index at given zoom.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees
            zoom: Zoom level

        Returns:
            TileIndex at the given zoom level
        """
        # Clamp latitude to valid range
        lat = max(-cls.MAX_LATITUDE, min(cls.MAX_LATITUDE, lat))

        n = 2 ** zoom
        x = math.floor((lng + 180.0) / 360.0 * n)
        lat_rad = math.radians(lat)
        y = math.floor((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)

        # Clamp to valid range
        x = max(0, min(x, n - 1))
        y = max(0, min(y, n - 1))

        return TileIndex(x=x, y=y, z=zoom)

    @classmethod
    def tile_to_bounds(cls, tile: TileIndex) -> TileBounds:
        """
        Get geographic bounds of a tile.

        Args:
            tile: Tile index

        Returns:
            TileBounds in EPSG:4326
        """
        n = 2 ** tile.z

        lng_min = tile.x / n * 360.0 - 180.0
        lng_max = (tile.x + 1) / n * 360.0 - 180.0

        lat_max = math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * tile.y / n))))
        lat_min = math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * (tile.y + 1) / n))))

        return TileBounds(minx=lng_min, miny=lat_min, maxx=lng_max, maxy=lat_max)

    @classmethod
    def pixel_in_tile(
        cls,
        lng: float,
        lat: float,
        bounds: TileBounds,
        tile_size: int = 256,
    ) -> Tuple[int, int]:
        """
        Pixel (column, row) of a point inside a tile image.

        The row is measured from the north edge because raster rows grow
        southward while latitude grows northward. Interpolation is linear
        within the tile bounds; results are clamped to the image.

        Returns:
            (col, row), each in [0, tile_size - 1]
        """
        col = math.floor((lng - bounds.minx) / bounds.width * tile_size)
        row = math.floor((bounds.maxy - lat) / bounds.height * tile_size)

        col = max(0, min(col, tile_size - 1))
        row = max(0, min(row, tile_size - 1))

        return col, row


def round_zoom(zoom: float, max_zoom: int, min_zoom: int = 0) -> int:
    """Round a fractional map zoom half-up and clamp it to the raster range."""
    return max(min_zoom, min(int(math.floor(zoom + 0.5)), max_zoom))
