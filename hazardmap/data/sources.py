"""Hazard tile source registry.

Handles loading the raster tile sources backing each hazard layer from a
YAML file and resolving a layer id to its tile URL template and zoom range.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from ..errors import DatasetError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HazardSource:
    """
    Raster tile source of a hazard layer.

    Attributes:
        layer_id: Map layer id (also the legend id)
        name: Display name
        tiles: XYZ URL templates with {z}, {x}, {y} placeholders
        min_zoom: Lowest zoom served
        max_zoom: Highest zoom served
        tile_size: Tile edge in pixels
        attribution: Data attribution
    """

    layer_id: str
    name: str
    tiles: Tuple[str, ...]
    min_zoom: int = 0
    max_zoom: int = 17
    tile_size: int = 256
    attribution: str = ""

    def tile_url(self, z: int, x: int, y: int) -> Optional[str]:
        """First URL template with the tile address substituted."""
        if not self.tiles:
            return None
        return (
            self.tiles[0]
            .replace("{z}", str(z))
            .replace("{x}", str(x))
            .replace("{y}", str(y))
        )


class HazardSourceRegistry:
    """Registry of hazard tile sources keyed by layer id."""

    def __init__(self, sources: Optional[List[HazardSource]] = None):
        self._sources: Dict[str, HazardSource] = {}
        for source in sources or []:
            self.register(source)

    def register(self, source: HazardSource) -> None:
        if source.layer_id in self._sources:
            raise DatasetError(f"Duplicate hazard source: {source.layer_id}")
        self._sources[source.layer_id] = source

    def get(self, layer_id: Optional[str]) -> Optional[HazardSource]:
        if layer_id is None:
            return None
        return self._sources.get(layer_id)

    def __contains__(self, layer_id: object) -> bool:
        return layer_id in self._sources

    def __iter__(self) -> Iterator[HazardSource]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    @property
    def layer_ids(self) -> List[str]:
        return list(self._sources)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HazardSourceRegistry":
        """Build the registry from a parsed ``{"sources": {...}}`` mapping.

        Raises:
            DatasetError: If an entry is malformed
        """
        if not isinstance(data, dict) or not isinstance(data.get("sources"), dict):
            raise DatasetError("Hazard source file must contain a 'sources' mapping")

        registry = cls()
        for layer_id, entry in data["sources"].items():
            registry.register(_parse_source(layer_id, entry))

        logger.debug("Loaded %d hazard sources", len(registry))
        return registry


def _parse_source(layer_id: str, entry: Any) -> HazardSource:
    if not isinstance(entry, dict):
        raise DatasetError(f"Hazard source '{layer_id}' must be a mapping")

    tiles = entry.get("tiles") or []
    if isinstance(tiles, str):
        tiles = [tiles]

    try:
        min_zoom = int(entry.get("minzoom", 0))
        max_zoom = int(entry.get("maxzoom", 17))
        tile_size = int(entry.get("tileSize", 256))
    except (TypeError, ValueError) as e:
        raise DatasetError(f"Hazard source '{layer_id}' has invalid numeric fields: {e}") from e

    if min_zoom > max_zoom:
        raise DatasetError(f"Hazard source '{layer_id}': minzoom > maxzoom")
    if tile_size <= 0:
        raise DatasetError(f"Hazard source '{layer_id}': tileSize must be positive")

    return HazardSource(
        layer_id=str(layer_id),
        name=str(entry.get("name", layer_id)),
        tiles=tuple(str(t) for t in tiles),
        min_zoom=min_zoom,
        max_zoom=max_zoom,
        tile_size=tile_size,
        attribution=str(entry.get("attribution", "")),
    )


def load_sources(path: Union[str, Path]) -> HazardSourceRegistry:
    """Load hazard tile sources from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise DatasetError(f"Hazard source file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DatasetError(f"Hazard source file {path} is not valid YAML: {e}") from e
    return HazardSourceRegistry.from_dict(data)
