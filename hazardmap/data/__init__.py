"""
Static datasets of the hazard map.

Provides loaders for the documents the map is configured with:
- Shelters: designated shelter points with accessibility attributes
- Legends: hazard layer color guides
- Sources: raster tile sources backing each hazard layer
"""

from .shelters import (
    AccessibilityAttribute,
    ShelterDataset,
    ShelterRecord,
    load_shelters,
    parse_shelters,
)
from .legends import (
    HazardLegend,
    LegendCatalog,
    LegendEntry,
    load_legends,
    parse_legends,
)
from .sources import (
    HazardSource,
    HazardSourceRegistry,
    load_sources,
)

__all__ = [
    "AccessibilityAttribute",
    "ShelterDataset",
    "ShelterRecord",
    "load_shelters",
    "parse_shelters",
    "HazardLegend",
    "LegendCatalog",
    "LegendEntry",
    "load_legends",
    "parse_legends",
    "HazardSource",
    "HazardSourceRegistry",
    "load_sources",
]
