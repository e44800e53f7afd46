"""
Geocoding adapter for the map's search control.

Forward geocoding turns a free-text query into shelter places through the
fuzzy index. Reverse geocoding turns a raw pair of numbers typed into the
search box into coordinate places; since the user may type either
"lat, lng" or "lng, lat", every plausible ordering is returned.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from shapely.geometry import Point

from .index import FuzzySearchIndex
from .normalize import normalize

logger = logging.getLogger(__name__)

LATITUDE_LIMIT = 90.0


@dataclass(frozen=True)
class PlaceResult:
    """A place suggested to the search control."""

    label: str
    longitude: float
    latitude: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)

    @property
    def geometry(self) -> Point:
        return Point(self.longitude, self.latitude)

    def to_feature(self) -> Dict[str, Any]:
        """Feature in the shape the geocoder control consumes."""
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [self.longitude, self.latitude]},
            "place_name": self.label,
            "center": [self.longitude, self.latitude],
            "properties": {},
        }


def _format_coordinate(value: float) -> str:
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return str(value)


def coordinate_place(lng: float, lat: float) -> PlaceResult:
    """Place for a bare coordinate, labelled with its latitude/longitude."""
    return PlaceResult(
        label=f"緯度: {_format_coordinate(lat)} 経度: {_format_coordinate(lng)}",
        longitude=lng,
        latitude=lat,
    )


def _cannot_be_latitude(value: float) -> bool:
    return value < -LATITUDE_LIMIT or value > LATITUDE_LIMIT


class GeocodeAdapter:
    """Forward and reverse geocoding backed by the shelter search index."""

    def __init__(self, index: FuzzySearchIndex):
        self.index = index

    def forward_geocode(self, query: str) -> List[PlaceResult]:
        """
        Find shelters matching ``query``.

        Returns:
            Places labelled "name,address", best match first
        """
        records = self.index.search(normalize(query))
        return [
            PlaceResult(
                label=f"{record.name},{record.address}",
                longitude=record.longitude,
                latitude=record.latitude,
            )
            for record in records
        ]

    def reverse_geocode(self, pair: Sequence[float]) -> List[PlaceResult]:
        """
        Interpret two numbers of unknown order as a coordinate.

        A value outside [-90, 90] cannot be a latitude, so it fixes the
        ordering. When both values could be latitudes the intent is
        ambiguous and both orderings are returned, (a, b) as (lng, lat)
        first. Never raises and always returns at least one place.
        """
        first, second = float(pair[0]), float(pair[1])
        places = []

        if _cannot_be_latitude(first):
            places.append(coordinate_place(first, second))
        if _cannot_be_latitude(second):
            places.append(coordinate_place(second, first))
        if not places:
            places.append(coordinate_place(first, second))
            places.append(coordinate_place(second, first))

        logger.debug("Reverse geocode %s -> %d candidate(s)", (first, second), len(places))
        return places
