"""
Shared fixtures for the hazard map tests.

Provides a small shelter dataset, the packaged legends and sources, and a
stub pixel sampler so classification runs without network access.
"""

import io
import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from hazardmap.config import DATA_DIR, HazardMapSettings
from hazardmap.data import load_legends, load_sources, parse_shelters

PRESENT = "○"


def shelter_feature(
    name: str,
    address: str,
    lng: float,
    lat: float,
    accessibility: Tuple[str, ...] = (),
) -> Dict:
    """Build one shelter feature in the open-data property layout."""
    properties = {
        "避難所_施設名称": name,
        "地方公共団体コード": 132021,
        "都道府県": "東京都",
        "指定市区町村名": "立川市",
        "所在地住所": address,
        "緯度": lat,
        "経度": lng,
        "エレベーター有/\n避難スペースが１階": None,
        "スロープ等": None,
        "点字ブロック": None,
        "車椅子使用者対応トイレ": None,
        "その他": None,
    }
    for key in accessibility:
        properties[key] = PRESENT
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lng, lat]},
        "properties": properties,
    }


@pytest.fixture
def shelter_document():
    """GeoJSON document with four shelters."""
    return {
        "type": "FeatureCollection",
        "features": [
            shelter_feature(
                "立川市役所", "東京都立川市泉町1156-9", 139.4131, 35.7139,
                accessibility=("スロープ等", "車椅子使用者対応トイレ"),
            ),
            shelter_feature("第一小学校", "東京都立川市柴崎町1-13-1", 139.4101, 35.6951),
            shelter_feature("第二小学校", "東京都立川市高松町2-14-1", 139.4194, 35.7057),
            shelter_feature(
                "ＡＢＣ体育館", "東京都立川市錦町3-2-26", 139.4233, 35.6914,
                accessibility=("エレベーター有/\n避難スペースが１階",),
            ),
        ],
    }


@pytest.fixture
def shelters(shelter_document):
    """Parsed shelter dataset."""
    return parse_shelters(shelter_document)


@pytest.fixture
def shelters_file(tmp_path, shelter_document):
    """Shelter dataset written to disk."""
    path = tmp_path / "shelters.geojson"
    path.write_text(json.dumps(shelter_document, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def legends():
    """Packaged hazard legends."""
    return load_legends(DATA_DIR / "hazard_legend.json")


@pytest.fixture
def sources():
    """Packaged hazard tile sources."""
    return load_sources(DATA_DIR / "hazard_sources.yaml")


@pytest.fixture
def settings(shelters_file):
    """Settings pointing at the test shelter dataset."""
    return HazardMapSettings(shelters_path=shelters_file)


class StubSampler:
    """Pixel sampler returning a fixed color and recording requests."""

    def __init__(self, rgba: Optional[Tuple[int, int, int, int]] = (247, 245, 169, 255)):
        self.rgba = rgba
        self.requests: List[Tuple[str, int, int]] = []
        self.tile_sizes: List[Optional[int]] = []

    async def sample(self, url: str, col: int, row: int, tile_size: Optional[int] = None):
        self.tile_sizes.append(tile_size)
        self.requests.append((url, col, row))
        return self.rgba


@pytest.fixture
def stub_sampler():
    """Sampler that always returns the first flood legend color."""
    return StubSampler()


def png_bytes(size: int, fill, pixels: Optional[Dict[Tuple[int, int], Tuple[int, int, int, int]]] = None) -> bytes:
    """Encode an RGBA PNG, optionally overriding single pixels by (col, row)."""
    img = Image.new("RGBA", (size, size), fill)
    for (col, row), rgba in (pixels or {}).items():
        img.putpixel((col, row), rgba)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def mock_session(status=200, content=b"", error=None):
    """aiohttp session mock whose get() yields one response."""
    response = MagicMock()
    response.status = status
    response.read = AsyncMock(return_value=content)

    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=response)
    cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    if error is not None:
        session.get = MagicMock(side_effect=error)
    else:
        session.get = MagicMock(return_value=cm)
    return session
