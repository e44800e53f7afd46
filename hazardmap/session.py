"""
Map session: routes map events into the core components.

One MapSession exists per open map. It owns the session-scoped state that
the components act on (active hazard layer, measurement points, reach area,
open popup) and translates map events into calls:

- click: cancel any measurement, then show shelter details when a shelter
  was hit, otherwise classify the active hazard layer under the cursor
- right-click: add or remove a measurement point
- viewport change / radius slider: recompute the reach area at zoom 13+
- hazard layer switch: change the legend and close the popup
- search box: forward and reverse geocoding

Every handler returns plain data for the UI to render; nothing here raises
to the UI for runtime conditions.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .config import HazardMapSettings, get_settings
from .data.legends import HazardLegend, LegendCatalog, load_legends
from .data.shelters import ShelterDataset, ShelterRecord, load_shelters
from .data.sources import HazardSourceRegistry, load_sources
from .hazard.classifier import HazardClassification, PixelClassifier
from .hazard.sampler import TilePixelSampler
from .measure.session import DistanceMeasurer
from .reach.buffer import PointLike, ReachAreaBuilder, ReachLayer
from .search.geocoder import GeocodeAdapter, PlaceResult
from .search.index import FuzzySearchIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShelterDetails:
    """Popup content for a clicked shelter."""

    index: int
    name: str
    address: str
    accessibility: List[str] = field(default_factory=list)
    coordinates: Optional[tuple] = None

    @classmethod
    def from_record(cls, record: ShelterRecord) -> "ShelterDetails":
        return cls(
            index=record.index,
            name=record.name,
            address=record.address,
            accessibility=record.accessibility_labels(),
            coordinates=record.coordinates,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "address": self.address,
            "accessibility": list(self.accessibility),
            "coordinates": list(self.coordinates) if self.coordinates else None,
        }


Popup = Union[ShelterDetails, HazardClassification]


class MapSession:
    """
    Session-scoped controller for one map.

    Example:
        session = MapSession.from_settings(sampler=sampler)
        session.select_hazard_layer("flood_layer")
        popup = await session.on_click(139.47, 35.68, zoom=15)
    """

    def __init__(
        self,
        shelters: ShelterDataset,
        legends: LegendCatalog,
        sources: HazardSourceRegistry,
        sampler: TilePixelSampler,
        settings: Optional[HazardMapSettings] = None,
    ):
        self.settings = settings or get_settings()
        self.shelters = shelters
        self.legends = legends
        self.sources = sources

        self.index = FuzzySearchIndex(shelters, threshold=self.settings.search_threshold)
        self.geocoder = GeocodeAdapter(self.index)
        self.classifier = PixelClassifier(
            sources, legends, sampler, timeout=self.settings.tile_timeout_seconds
        )
        self.measurer = DistanceMeasurer()
        self.reach = ReachLayer(ReachAreaBuilder(segments=self.settings.reach_segments))

        self.active_layer_id: Optional[str] = None
        self.popup: Optional[Popup] = None
        self.radius_m: float = 0.0

    @classmethod
    def from_settings(
        cls,
        sampler: TilePixelSampler,
        settings: Optional[HazardMapSettings] = None,
    ) -> "MapSession":
        """
        Load all datasets named by the settings.

        Raises:
            DatasetError: If a dataset is missing or malformed
        """
        settings = settings or get_settings()
        shelters = (
            load_shelters(settings.shelters_path)
            if settings.shelters_path is not None
            else ShelterDataset([])
        )
        return cls(
            shelters=shelters,
            legends=load_legends(settings.legends_path),
            sources=load_sources(settings.sources_path),
            sampler=sampler,
            settings=settings,
        )

    # -------------------------------------------------------------------------
    # Hazard layers
    # -------------------------------------------------------------------------

    def select_hazard_layer(self, layer_id: str) -> Optional[HazardLegend]:
        """
        Make ``layer_id`` the active hazard layer.

        Returns:
            The layer's legend for the color guide, or None if the legend
            document has no such layer (the layer stays active regardless)
        """
        self.active_layer_id = layer_id
        self.popup = None
        legend = self.legends.get(layer_id)
        if legend is None:
            logger.debug("No legend for selected layer %r", layer_id)
        return legend

    # -------------------------------------------------------------------------
    # Map events
    # -------------------------------------------------------------------------

    async def on_click(
        self,
        lng: float,
        lat: float,
        zoom: float,
        shelter_index: Optional[int] = None,
    ) -> Optional[Popup]:
        """
        Handle a primary click.

        Args:
            lng: Click longitude
            lat: Click latitude
            zoom: Current map zoom
            shelter_index: Index of the shelter under the cursor, if any

        Returns:
            Popup content, or None when nothing should be shown
        """
        self.measurer.reset()

        if shelter_index is not None:
            record = self.shelters.get(shelter_index)
            if record is not None:
                self.popup = ShelterDetails.from_record(record)
                return self.popup
            logger.debug("Clicked shelter index %s is not in the dataset", shelter_index)

        self.popup = await self.classifier.classify(lng, lat, self.active_layer_id, zoom)
        return self.popup

    def on_right_click(
        self,
        lng: float,
        lat: float,
        point_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Add a measurement point, or remove the one under the cursor."""
        return self.measurer.toggle_vertex(lng, lat, target_id=point_id)

    def on_viewport_change(
        self,
        zoom: float,
        visible_points: Iterable[PointLike],
    ) -> Optional[Dict[str, Any]]:
        """
        Refresh the reach area after the map moved.

        Returns:
            Reach GeoJSON, or None when zoomed out too far or left unchanged
        """
        if not self.reach_enabled(zoom):
            return None
        if not self.reach.update(visible_points, self.radius_m):
            return None
        return self.reach.to_geojson()

    def on_radius_change(
        self,
        radius_m: float,
        zoom: float,
        visible_points: Iterable[PointLike],
    ) -> Optional[Dict[str, Any]]:
        """Apply a new reach radius from the slider."""
        self.radius_m = float(radius_m)
        return self.on_viewport_change(zoom, visible_points)

    def reach_enabled(self, zoom: float) -> bool:
        return zoom >= self.settings.reach_min_zoom

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def forward_geocode(self, query: str) -> List[PlaceResult]:
        return self.geocoder.forward_geocode(query)

    def reverse_geocode(self, pair: Sequence[float]) -> List[PlaceResult]:
        return self.geocoder.reverse_geocode(pair)
