"""
Distance measurement along user-placed points.
"""

from .distance import EARTH_RADIUS_KM, format_km, haversine_km, path_length_km
from .session import DistanceMeasurer, MeasurementPoint

__all__ = [
    "EARTH_RADIUS_KM",
    "format_km",
    "haversine_km",
    "path_length_km",
    "DistanceMeasurer",
    "MeasurementPoint",
]
