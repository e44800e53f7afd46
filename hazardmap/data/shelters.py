"""Shelter point dataset.

Loads the designated-shelter GeoJSON published as municipal open data (one
Point feature per shelter, Japanese property names) into immutable
ShelterRecord objects. The collection is read once at startup and never
mutated; a record's identity is its position in the source collection.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import DatasetError

logger = logging.getLogger(__name__)

# Value used by the source data to flag an accessibility feature as present
PRESENT_MARKER = "○"

NAME_KEY = "避難所_施設名称"
ADDRESS_KEY = "所在地住所"
MUNICIPALITY_CODE_KEY = "地方公共団体コード"
PREFECTURE_KEY = "都道府県"
MUNICIPALITY_KEY = "指定市区町村名"
LATITUDE_KEY = "緯度"
LONGITUDE_KEY = "経度"


class AccessibilityAttribute(Enum):
    """Barrier-free attributes published for each shelter."""

    ELEVATOR = "エレベーター有/\n避難スペースが１階"
    SLOPE = "スロープ等"
    BRAILLE_BLOCK = "点字ブロック"
    ACCESSIBLE_TOILET = "車椅子使用者対応トイレ"
    OTHER = "その他"

    @property
    def label(self) -> str:
        """Human-readable label shown in the shelter popup."""
        return ACCESSIBILITY_LABELS[self]


ACCESSIBILITY_LABELS = {
    AccessibilityAttribute.ELEVATOR: "エレベーター有り/避難スペースが1階",
    AccessibilityAttribute.SLOPE: "スロープ等有り",
    AccessibilityAttribute.BRAILLE_BLOCK: "点字ブロック有り",
    AccessibilityAttribute.ACCESSIBLE_TOILET: "車椅子使用者対応トイレ有り",
    AccessibilityAttribute.OTHER: "その他の設備有り",
}

NO_ACCESSIBILITY_LABEL = "なし"


@dataclass(frozen=True)
class ShelterRecord:
    """
    A designated shelter.

    Attributes:
        index: Position in the source collection (record identity)
        name: Facility name
        address: Street address
        municipality_code: Local government code
        longitude: WGS84 longitude
        latitude: WGS84 latitude
        prefecture: Prefecture name
        municipality: Municipality name
        accessibility: Accessibility attributes flagged as present
    """

    index: int
    name: str
    address: str
    municipality_code: int
    longitude: float
    latitude: float
    prefecture: str = ""
    municipality: str = ""
    accessibility: Tuple[AccessibilityAttribute, ...] = ()

    @property
    def coordinates(self) -> Tuple[float, float]:
        """(longitude, latitude) pair."""
        return (self.longitude, self.latitude)

    def has(self, attribute: AccessibilityAttribute) -> bool:
        return attribute in self.accessibility

    def accessibility_labels(self) -> List[str]:
        """Labels of present attributes in declaration order, or ["なし"]."""
        labels = [attr.label for attr in AccessibilityAttribute if attr in self.accessibility]
        return labels or [NO_ACCESSIBILITY_LABEL]

    def to_geojson_feature(self) -> Dict[str, Any]:
        """Convert back to a GeoJSON Feature with source property names."""
        properties: Dict[str, Any] = {
            NAME_KEY: self.name,
            MUNICIPALITY_CODE_KEY: self.municipality_code,
            PREFECTURE_KEY: self.prefecture,
            MUNICIPALITY_KEY: self.municipality,
            ADDRESS_KEY: self.address,
            LATITUDE_KEY: self.latitude,
            LONGITUDE_KEY: self.longitude,
        }
        for attr in AccessibilityAttribute:
            properties[attr.value] = PRESENT_MARKER if attr in self.accessibility else None
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [self.longitude, self.latitude]},
            "properties": properties,
        }


class ShelterDataset(Sequence[ShelterRecord]):
    """Read-only, index-addressable collection of shelters."""

    def __init__(self, records: Sequence[ShelterRecord]):
        self._records: Tuple[ShelterRecord, ...] = tuple(records)

    def __getitem__(self, index):
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ShelterRecord]:
        return iter(self._records)

    def get(self, index: int) -> Optional[ShelterRecord]:
        """Record at ``index`` or None when out of range."""
        if 0 <= index < len(self._records):
            return self._records[index]
        return None

    def coordinates(self) -> List[Tuple[float, float]]:
        """All shelter positions, in collection order."""
        return [record.coordinates for record in self._records]

    def within_bbox(self, bbox: Tuple[float, float, float, float]) -> List[ShelterRecord]:
        """Shelters inside (min_lon, min_lat, max_lon, max_lat)."""
        min_lon, min_lat, max_lon, max_lat = bbox
        return [
            r for r in self._records
            if min_lon <= r.longitude <= max_lon and min_lat <= r.latitude <= max_lat
        ]

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [record.to_geojson_feature() for record in self._records],
        }


def _parse_feature(index: int, feature: Dict[str, Any]) -> ShelterRecord:
    properties = feature.get("properties") or {}
    geometry = feature.get("geometry") or {}

    if geometry.get("type") == "Point" and len(geometry.get("coordinates") or []) >= 2:
        lng, lat = geometry["coordinates"][:2]
    elif properties.get(LONGITUDE_KEY) is not None and properties.get(LATITUDE_KEY) is not None:
        lng, lat = properties[LONGITUDE_KEY], properties[LATITUDE_KEY]
    else:
        raise DatasetError(f"Shelter feature {index} has no point geometry")

    name = properties.get(NAME_KEY)
    if not name:
        raise DatasetError(f"Shelter feature {index} has no facility name")

    try:
        code = int(properties.get(MUNICIPALITY_CODE_KEY) or 0)
        lng, lat = float(lng), float(lat)
    except (TypeError, ValueError) as e:
        raise DatasetError(f"Shelter feature {index} has invalid numeric fields: {e}") from e

    accessibility = tuple(
        attr for attr in AccessibilityAttribute
        if properties.get(attr.value) == PRESENT_MARKER
    )

    return ShelterRecord(
        index=index,
        name=str(name),
        address=str(properties.get(ADDRESS_KEY) or ""),
        municipality_code=code,
        longitude=lng,
        latitude=lat,
        prefecture=str(properties.get(PREFECTURE_KEY) or ""),
        municipality=str(properties.get(MUNICIPALITY_KEY) or ""),
        accessibility=accessibility,
    )


def parse_shelters(document: Dict[str, Any]) -> ShelterDataset:
    """
    Build a ShelterDataset from a GeoJSON FeatureCollection.

    Args:
        document: Parsed GeoJSON document

    Returns:
        ShelterDataset in source order

    Raises:
        DatasetError: If the document is not a FeatureCollection or a feature
            lacks a name or point geometry
    """
    if not isinstance(document, dict) or document.get("type") != "FeatureCollection":
        raise DatasetError("Shelter document must be a GeoJSON FeatureCollection")

    features = document.get("features") or []
    records = [_parse_feature(i, feature) for i, feature in enumerate(features)]
    logger.info("Loaded %d shelters", len(records))
    return ShelterDataset(records)


def load_shelters(path: Union[str, Path]) -> ShelterDataset:
    """Load shelters from a GeoJSON file."""
    path = Path(path)
    if not path.exists():
        raise DatasetError(f"Shelter dataset not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Shelter dataset {path} is not valid JSON: {e}") from e
    return parse_shelters(document)
