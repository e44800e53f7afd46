"""
Hazard map core.

Interactive geospatial algorithms behind a disaster-preparedness web map:
shelter search, hazard raster classification, distance measurement and
shelter reach areas.
"""

__version__ = "0.1.0"

from .session import MapSession, ShelterDetails

__all__ = ["MapSession", "ShelterDetails", "__version__"]
