"""
Hazard raster classification.

Resolves a map click on a hazard layer to a legend category: find the tile
under the click, read the pixel the click falls on, and pick the legend
entry whose reference color is nearest to the sampled color. Hazard tiles
are transparent outside mapped zones, so a transparent pixel means "no
hazard here" rather than a category.

Classification is best-effort against external imagery: unknown layers,
missing legends, unavailable tiles and timeouts all yield None.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from ..data.legends import HazardLegend, LegendCatalog, LegendEntry
from ..data.sources import HazardSource, HazardSourceRegistry
from ..errors import TileSampleError
from ..utils.color_utils import RGB, nearest_color_index
from .sampler import RGBA, TilePixelSampler
from .tiles import TileBounds, TileIndex, WebMercatorTiles, round_zoom

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_TIMEOUT = 10.0


@dataclass(frozen=True)
class TileLocation:
    """Tile and pixel a geographic point falls on."""

    tile: TileIndex
    bounds: TileBounds
    url: str
    col: int
    row: int
    tile_size: int = 256


@dataclass(frozen=True)
class HazardClassification:
    """
    Legend category of a clicked hazard pixel.

    Attributes:
        layer_id: Hazard layer id
        layer_name: Display name of the legend
        label: Matched legend label
        color: Matched legend reference color
        sampled: Pixel color read from the tile
    """

    layer_id: str
    layer_name: str
    label: str
    color: RGB
    sampled: RGBA

    @property
    def entry(self) -> LegendEntry:
        return LegendEntry(rgb=self.color, label=self.label)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layer_id": self.layer_id,
            "layer_name": self.layer_name,
            "label": self.label,
            "color": self.entry.hex,
            "sampled": list(self.sampled),
        }


def nearest_legend_entry(rgb: Sequence[int], entries: Sequence[LegendEntry]) -> Optional[LegendEntry]:
    """
    Legend entry with the smallest Euclidean RGB distance to ``rgb``.

    Ties resolve to the first listed entry. Returns None for an empty legend.
    """
    if not entries:
        return None
    return entries[nearest_color_index(rgb, [entry.rgb for entry in entries])]


def locate_pixel(source: HazardSource, lng: float, lat: float, zoom: float) -> Optional[TileLocation]:
    """
    Find the tile URL and pixel for a point on a hazard source.

    Returns:
        TileLocation, or None if the source has no tile URL template
    """
    z = round_zoom(zoom, source.max_zoom)
    tile = WebMercatorTiles.latlng_to_tile(lat, lng, z)
    bounds = WebMercatorTiles.tile_to_bounds(tile)

    url = source.tile_url(tile.z, tile.x, tile.y)
    if url is None:
        return None

    col, row = WebMercatorTiles.pixel_in_tile(lng, lat, bounds, source.tile_size)
    return TileLocation(
        tile=tile, bounds=bounds, url=url, col=col, row=row, tile_size=source.tile_size
    )


class PixelClassifier:
    """
    Classifies hazard raster pixels against layer legends.

    Example:
        classifier = PixelClassifier(sources, legends, sampler)
        result = await classifier.classify(139.47, 35.68, "flood_layer", 15.2)
        if result:
            print(result.layer_name, result.label)
    """

    def __init__(
        self,
        sources: HazardSourceRegistry,
        legends: LegendCatalog,
        sampler: TilePixelSampler,
        timeout: float = DEFAULT_SAMPLE_TIMEOUT,
    ):
        """
        Initialize classifier.

        Args:
            sources: Hazard tile sources
            legends: Hazard legends
            sampler: Pixel sampling capability
            timeout: Bound on waiting for a pixel, in seconds
        """
        self.sources = sources
        self.legends = legends
        self.sampler = sampler
        self.timeout = timeout

    async def _sample(self, location: TileLocation) -> Optional[RGBA]:
        try:
            return await asyncio.wait_for(
                self.sampler.sample(
                    location.url, location.col, location.row, tile_size=location.tile_size
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Timed out sampling %s after %.1fs", location.url, self.timeout)
        except TileSampleError as e:
            logger.warning("%s", e)
        return None

    async def classify(
        self,
        lng: float,
        lat: float,
        layer_id: Optional[str],
        zoom: float,
    ) -> Optional[HazardClassification]:
        """
        Classify the hazard pixel under a point.

        Args:
            lng: Click longitude
            lat: Click latitude
            layer_id: Active hazard layer id
            zoom: Current map zoom (may be fractional)

        Returns:
            HazardClassification, or None when there is nothing to show
        """
        source = self.sources.get(layer_id)
        if source is None:
            logger.debug("No tile source for layer %r", layer_id)
            return None

        legend: Optional[HazardLegend] = self.legends.get(layer_id)
        if legend is None:
            logger.debug("No legend for layer %r", layer_id)
            return None

        location = locate_pixel(source, lng, lat, zoom)
        if location is None:
            logger.debug("Layer %r has no tile URL template", layer_id)
            return None

        rgba = await self._sample(location)
        if rgba is None:
            return None

        r, g, b, a = rgba
        if a == 0:
            return None

        entry = nearest_legend_entry((r, g, b), legend.entries)
        if entry is None:
            return None

        logger.debug(
            "Pixel %s at tile %s classified as %r on %s",
            rgba, location.tile.to_tuple(), entry.label, layer_id,
        )
        return HazardClassification(
            layer_id=legend.id,
            layer_name=legend.name,
            label=entry.label,
            color=entry.rgb,
            sampled=(r, g, b, a),
        )


def classify_pixel(rgba: Sequence[int], legend: HazardLegend) -> Optional[LegendEntry]:
    """Classify an already-sampled pixel; None when it is transparent."""
    if len(rgba) >= 4 and rgba[3] == 0:
        return None
    return nearest_legend_entry(tuple(rgba[:3]), legend.entries)
