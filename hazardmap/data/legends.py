"""
Hazard legend dataset.

The legend document maps each hazard layer id to a display name and an
ordered list of (color, label) pairs, the same list rendered as the on-map
color guide. Order is display order; classification uses it only to break
ties between equally distant colors.

Document shape::

    [
      {"id": "flood_layer", "name": "洪水浸水想定区域",
       "guide_color": [{"color": "#F7F5A9", "label": "0.5m未満"}, ...]},
      ...
    ]
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import DatasetError
from ..utils.color_utils import RGB, parse_color, rgb_to_hex

logger = logging.getLogger(__name__)


# =============================================================================
# Document schema
# =============================================================================


class GuideColorModel(BaseModel):
    """One color guide row of the legend document."""

    color: str = Field(..., description="CSS color (hex or rgb()/rgba())")
    label: str = Field(..., min_length=1, description="Category label")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        parse_color(v)
        return v


class HazardLegendModel(BaseModel):
    """Legend of a single hazard layer."""

    id: str = Field(..., min_length=1, description="Hazard layer id")
    name: str = Field(..., description="Display name of the hazard layer")
    guide_color: List[GuideColorModel] = Field(..., min_length=1)


# =============================================================================
# Domain types
# =============================================================================


@dataclass(frozen=True)
class LegendEntry:
    """A reference color and the hazard category it stands for."""

    rgb: RGB
    label: str

    @property
    def hex(self) -> str:
        return rgb_to_hex(*self.rgb)

    def to_dict(self) -> Dict[str, Any]:
        return {"color": self.hex, "label": self.label}


@dataclass(frozen=True)
class HazardLegend:
    """Ordered legend entries of one hazard layer."""

    id: str
    name: str
    entries: Tuple[LegendEntry, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "guide_color": [entry.to_dict() for entry in self.entries],
        }


class LegendCatalog:
    """Hazard legends keyed by layer id, in document order."""

    def __init__(self, legends: List[HazardLegend]):
        self._legends: Dict[str, HazardLegend] = {}
        for legend in legends:
            if legend.id in self._legends:
                raise DatasetError(f"Duplicate legend id: {legend.id}")
            self._legends[legend.id] = legend

    def get(self, layer_id: Optional[str]) -> Optional[HazardLegend]:
        if layer_id is None:
            return None
        return self._legends.get(layer_id)

    def __contains__(self, layer_id: object) -> bool:
        return layer_id in self._legends

    def __iter__(self) -> Iterator[HazardLegend]:
        return iter(self._legends.values())

    def __len__(self) -> int:
        return len(self._legends)

    @property
    def layer_ids(self) -> List[str]:
        return list(self._legends)


def parse_legends(document: Any) -> LegendCatalog:
    """
    Validate a legend document and build the catalog.

    Raises:
        DatasetError: If the document does not match the legend schema
    """
    if not isinstance(document, list):
        raise DatasetError("Legend document must be a list of hazard legends")

    legends = []
    for i, item in enumerate(document):
        try:
            model = HazardLegendModel.model_validate(item)
        except ValidationError as e:
            raise DatasetError(f"Invalid legend at position {i}: {e}") from e
        legends.append(
            HazardLegend(
                id=model.id,
                name=model.name,
                entries=tuple(
                    LegendEntry(rgb=parse_color(row.color), label=row.label)
                    for row in model.guide_color
                ),
            )
        )

    logger.debug("Loaded %d hazard legends", len(legends))
    return LegendCatalog(legends)


def load_legends(path: Union[str, Path]) -> LegendCatalog:
    """Load the legend catalog from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise DatasetError(f"Legend document not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Legend document {path} is not valid JSON: {e}") from e
    return parse_legends(document)
