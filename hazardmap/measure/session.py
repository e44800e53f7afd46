"""
Multi-point distance measurement.

A DistanceMeasurer holds the points a user placed with right-clicks, in
placement order, which is the path being measured. Right-clicking an
existing point removes it; right-clicking elsewhere appends a point. After
every change each point is relabelled with the path length from the first
point up to itself, and a line through all points is produced once there
are at least two.

One measurer belongs to one map session. Labels are always recomputed from
the first point: paths are short and user-placed, so there is nothing to
gain from incremental updates.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .distance import format_km, path_length_km

logger = logging.getLogger(__name__)


@dataclass
class MeasurementPoint:
    """
    A user-placed vertex of the measured path.

    Attributes:
        id: Unique identifier, used to target the point for removal
        coordinates: (longitude, latitude)
        distance: Cumulative distance label ("" for the first point)
    """

    id: str
    coordinates: Tuple[float, float]
    distance: str = ""

    def to_geojson_feature(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": list(self.coordinates)},
            "properties": {"id": self.id, "distance": self.distance},
        }


def _new_point_id() -> str:
    return uuid.uuid4().hex


class DistanceMeasurer:
    """
    Session-scoped measurement state.

    Example:
        measurer = DistanceMeasurer()
        measurer.toggle_vertex(139.70, 35.68)
        geojson = measurer.toggle_vertex(139.71, 35.69)
        first_id = measurer.points[0].id
        measurer.toggle_vertex(139.70, 35.68, target_id=first_id)  # removes it
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self._points: List[MeasurementPoint] = []
        self._line: Optional[List[Tuple[float, float]]] = None
        self._id_factory = id_factory or _new_point_id

    @property
    def points(self) -> Tuple[MeasurementPoint, ...]:
        return tuple(self._points)

    @property
    def line(self) -> Optional[List[Tuple[float, float]]]:
        """Path coordinates, or None with fewer than two points."""
        return list(self._line) if self._line is not None else None

    @property
    def total_km(self) -> float:
        return path_length_km([p.coordinates for p in self._points])

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point_id: object) -> bool:
        return any(p.id == point_id for p in self._points)

    def reset(self) -> None:
        """Discard the current measurement."""
        if self._points:
            logger.debug("Measurement reset (%d points discarded)", len(self._points))
        self._points = []
        self._line = None

    def toggle_vertex(
        self,
        lng: float,
        lat: float,
        target_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Handle a measurement interaction.

        Args:
            lng: Interaction longitude
            lat: Interaction latitude
            target_id: Id of the measurement point under the cursor, if any

        Returns:
            Feature collection of points (and the path line) to render
        """
        if target_id is not None and target_id in self:
            self.remove(target_id)
        else:
            self.add(lng, lat)
        return self.to_geojson()

    def add(self, lng: float, lat: float) -> MeasurementPoint:
        """Append a point at the end of the path."""
        point = MeasurementPoint(id=self._id_factory(), coordinates=(float(lng), float(lat)))
        self._points.append(point)
        self._recompute()
        return point

    def remove(self, point_id: str) -> bool:
        """Remove exactly the point with ``point_id``; False if absent."""
        remaining = [p for p in self._points if p.id != point_id]
        if len(remaining) == len(self._points):
            return False
        self._points = remaining
        self._recompute()
        return True

    def _recompute(self) -> None:
        if len(self._points) < 2:
            for point in self._points:
                point.distance = ""
            self._line = None
            return

        coordinates = [p.coordinates for p in self._points]
        for i, point in enumerate(self._points):
            if i == 0:
                point.distance = ""
            else:
                point.distance = format_km(path_length_km(coordinates[: i + 1]))
        self._line = coordinates

    def to_geojson(self) -> Dict[str, Any]:
        """Points in path order followed by the path line, when present."""
        features = [point.to_geojson_feature() for point in self._points]
        if self._line is not None:
            features.append(
                {
                    "type": "Feature",
                    "geometry": {
                        "type": "LineString",
                        "coordinates": [list(c) for c in self._line],
                    },
                    "properties": {"distance": self._points[-1].distance},
                }
            )
        return {"type": "FeatureCollection", "features": features}
