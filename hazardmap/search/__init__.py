"""
Shelter search: text normalization, fuzzy index and geocoding adapter.
"""

from .normalize import normalize
from .index import FuzzySearchIndex, SearchField, SearchHit, SearchIndexEntry
from .geocoder import GeocodeAdapter, PlaceResult, coordinate_place

__all__ = [
    "normalize",
    "FuzzySearchIndex",
    "SearchField",
    "SearchHit",
    "SearchIndexEntry",
    "GeocodeAdapter",
    "PlaceResult",
    "coordinate_place",
]
