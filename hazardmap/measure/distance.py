"""Great-circle path lengths for on-map measurement."""

import math
from typing import Sequence, Tuple

# Mean earth radius used by web-map measuring tools (1 deg latitude ~ 111.19 km)
EARTH_RADIUS_KM = 6371.0088


def haversine_km(lng1: float, lat1: float, lng2: float, lat2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def path_length_km(coordinates: Sequence[Tuple[float, float]]) -> float:
    """Length of a (lng, lat) polyline in kilometers; 0 for fewer than 2 points."""
    total = 0.0
    for (lng1, lat1), (lng2, lat2) in zip(coordinates, coordinates[1:]):
        total += haversine_km(lng1, lat1, lng2, lat2)
    return total


def format_km(km: float) -> str:
    """Distance label with two decimals and unit suffix, e.g. "1.25km"."""
    return f"{km:.2f}km"
