"""
Shelter reach areas.

Buffers every shelter point by a walking radius and dissolves the circles
into one coverage geometry. Circles are geodesic: each vertex is placed at
the exact radius along its bearing on the WGS84 ellipsoid (pyproj ``Geod``),
so large radii stay round at any latitude. Overlapping circles merge into a
single part; disjoint ones remain separate parts of a MultiPolygon. A circle
that crosses the antimeridian is cut there and its pieces are kept on either
side of the dateline.

The input points come from whatever the map has loaded, which is incomplete
when zoomed out, so callers only compute reach areas at ``REACH_MIN_ZOOM``
or closer. The builder itself does not check the zoom.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from pyproj import Geod
from shapely.affinity import translate
from shapely.geometry import MultiPolygon, Point, Polygon, box, mapping
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

logger = logging.getLogger(__name__)

REACH_MIN_ZOOM = 13
DEFAULT_SEGMENTS = 64

PointLike = Union[Point, Sequence[float]]

# (x offset, window) pairs mapping unwrapped longitudes back into [-180, 180]
_WORLD_WINDOWS = (
    (0.0, box(-180.0, -90.0, 180.0, 90.0)),
    (-360.0, box(180.0, -90.0, 540.0, 90.0)),
    (360.0, box(-540.0, -90.0, -180.0, 90.0)),
)


def _xy(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, Point):
        return (point.x, point.y)
    return (float(point[0]), float(point[1]))


def _as_multipolygon(geometry) -> MultiPolygon:
    if geometry.is_empty:
        return MultiPolygon()
    if isinstance(geometry, MultiPolygon):
        return geometry
    if isinstance(geometry, Polygon):
        return MultiPolygon([geometry])
    return MultiPolygon([g for g in getattr(geometry, "geoms", []) if isinstance(g, Polygon)])


class ReachAreaBuilder:
    """
    Builds dissolved buffer polygons around points.

    Example:
        builder = ReachAreaBuilder()
        area = builder.compute_reach([(139.70, 35.68), (139.71, 35.68)], 500)
        print(len(area.geoms))
    """

    def __init__(self, segments: int = DEFAULT_SEGMENTS, ellps: str = "WGS84"):
        """
        Initialize builder.

        Args:
            segments: Vertices per buffer circle
            ellps: pyproj ellipsoid name
        """
        if segments < 3:
            raise ValueError(f"segments must be at least 3, got {segments}")
        self.segments = segments
        self.geod = Geod(ellps=ellps)
        self._azimuths = np.linspace(0.0, 360.0, segments, endpoint=False)

    def buffer_point(self, lng: float, lat: float, radius_m: float) -> Union[Polygon, MultiPolygon]:
        """
        Geodesic circle of ``radius_m`` metres around a point.

        Returns a MultiPolygon with one piece on each side of the dateline
        when the circle crosses the antimeridian.
        """
        n = self.segments
        lons, lats, _ = self.geod.fwd(
            np.full(n, lng, dtype=float),
            np.full(n, lat, dtype=float),
            self._azimuths,
            np.full(n, radius_m, dtype=float),
        )
        # continuous around the center, may leave [-180, 180]
        lons = lng + (np.asarray(lons) - lng + 180.0) % 360.0 - 180.0
        circle = orient(Polygon(zip(lons, lats)))

        minx, _, maxx, _ = circle.bounds
        if -180.0 <= minx and maxx <= 180.0:
            return circle

        pieces: List[Polygon] = []
        for xoff, window in _WORLD_WINDOWS:
            piece = circle.intersection(window)
            if not piece.is_empty:
                pieces.extend(orient(translate(p, xoff=xoff)) for p in _as_multipolygon(piece).geoms)
        return MultiPolygon(pieces)

    def compute_reach(
        self,
        points: Iterable[PointLike],
        radius_m: float,
    ) -> Optional[MultiPolygon]:
        """
        Buffer and dissolve points.

        Args:
            points: (lng, lat) pairs or shapely Points
            radius_m: Buffer radius in metres

        Returns:
            Dissolved reach area; an empty MultiPolygon when the radius is 0;
            None when there are no points (leave the current area as is)
        """
        if radius_m <= 0:
            if radius_m < 0:
                logger.warning("Negative reach radius %s treated as 0", radius_m)
            return MultiPolygon()

        coords = [_xy(p) for p in points]
        if not coords:
            logger.debug("No points to buffer; reach area left unchanged")
            return None

        circles = [self.buffer_point(lng, lat, radius_m) for lng, lat in coords]
        merged = _as_multipolygon(unary_union(circles))

        logger.debug(
            "Reach area for %d points at %.0fm: %d part(s)",
            len(coords), radius_m, len(merged.geoms),
        )
        return merged


class ReachLayer:
    """
    Current reach area of a map session.

    Holds the polygon shown on the "buffer" source and replaces it wholesale
    on every computation.
    """

    def __init__(self, builder: Optional[ReachAreaBuilder] = None):
        self.builder = builder or ReachAreaBuilder()
        self.area: MultiPolygon = MultiPolygon()
        self.radius_m: float = 0.0

    def update(self, points: Iterable[PointLike], radius_m: float) -> bool:
        """
        Recompute the reach area.

        Returns:
            True if the area was replaced, False if left unchanged
        """
        result = self.builder.compute_reach(points, radius_m)
        if result is None:
            return False
        self.area = result
        self.radius_m = max(float(radius_m), 0.0)
        return True

    def clear(self) -> None:
        self.area = MultiPolygon()
        self.radius_m = 0.0

    def to_geojson(self) -> Dict[str, Any]:
        """One polygon feature per dissolved part."""
        features: List[Dict[str, Any]] = [
            {
                "type": "Feature",
                "geometry": mapping(part),
                "properties": {"radius_m": self.radius_m},
            }
            for part in self.area.geoms
        ]
        return {"type": "FeatureCollection", "features": features}
