"""
Tests for dataset loaders.

- TestShelterLoader: shelter GeoJSON parsing
- TestLegendLoader: legend document validation
- TestSourceLoader: hazard tile source registry
"""

import json

import pytest

from conftest import shelter_feature
from hazardmap.config import DATA_DIR
from hazardmap.data import (
    AccessibilityAttribute,
    HazardSourceRegistry,
    load_legends,
    load_shelters,
    load_sources,
    parse_legends,
    parse_shelters,
)
from hazardmap.errors import DatasetError


class TestShelterLoader:
    """Shelter GeoJSON documents."""

    def test_records_in_source_order(self, shelters):
        assert [r.index for r in shelters] == [0, 1, 2, 3]
        assert shelters[0].name == "立川市役所"
        assert shelters[0].coordinates == (139.4131, 35.7139)

    def test_accessibility_flags(self, shelters):
        assert shelters[0].has(AccessibilityAttribute.SLOPE)
        assert shelters[0].has(AccessibilityAttribute.ACCESSIBLE_TOILET)
        assert not shelters[0].has(AccessibilityAttribute.ELEVATOR)
        assert shelters[3].accessibility_labels() == ["エレベーター有り/避難スペースが1階"]

    def test_coordinates_from_properties(self):
        feature = shelter_feature("公民館", "立川市", 139.4, 35.7)
        feature["geometry"] = None
        dataset = parse_shelters({"type": "FeatureCollection", "features": [feature]})
        assert dataset[0].coordinates == (139.4, 35.7)

    def test_round_trip_feature(self, shelters, shelter_document):
        assert shelters[0].to_geojson_feature()["properties"] == shelter_document["features"][0]["properties"]

    def test_get_out_of_range(self, shelters):
        assert shelters.get(10) is None
        assert shelters.get(-1) is None

    def test_within_bbox(self, shelters):
        names = [r.name for r in shelters.within_bbox((139.41, 35.70, 139.42, 35.72))]
        assert names == ["立川市役所", "第二小学校"]

    def test_not_a_feature_collection(self):
        with pytest.raises(DatasetError):
            parse_shelters({"type": "Feature"})

    def test_missing_name(self):
        feature = shelter_feature("", "立川市", 139.4, 35.7)
        with pytest.raises(DatasetError):
            parse_shelters({"type": "FeatureCollection", "features": [feature]})

    def test_missing_point(self):
        feature = shelter_feature("公民館", "立川市", 139.4, 35.7)
        feature["geometry"] = None
        feature["properties"]["緯度"] = None
        with pytest.raises(DatasetError):
            parse_shelters({"type": "FeatureCollection", "features": [feature]})

    def test_load_file(self, shelters_file):
        assert len(load_shelters(shelters_file)) == 4

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(DatasetError):
            load_shelters(tmp_path / "missing.geojson")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.geojson"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(DatasetError):
            load_shelters(path)


class TestLegendLoader:
    """Legend documents."""

    def test_packaged_legends(self, legends):
        assert set(legends.layer_ids) == {
            "flood_layer", "hightide_layer", "tsunami_layer",
            "doseki_layer", "kyukeisha_layer", "jisuberi_layer",
        }
        flood = legends.get("flood_layer")
        assert flood.entries[0].label == "0.5m未満"
        assert flood.entries[0].rgb == (247, 245, 169)

    def test_rgb_function_colors(self):
        catalog = parse_legends(
            [{"id": "a", "name": "A", "guide_color": [{"color": "rgb(1, 2, 3)", "label": "x"}]}]
        )
        assert catalog.get("a").entries[0].rgb == (1, 2, 3)

    def test_round_trip_dict(self, legends):
        flood = legends.get("flood_layer")
        assert parse_legends([flood.to_dict()]).get("flood_layer") == flood

    @pytest.mark.parametrize(
        "document",
        [
            {"id": "a"},
            [{"id": "a", "name": "A", "guide_color": []}],
            [{"id": "a", "name": "A", "guide_color": [{"color": "blue-ish", "label": "x"}]}],
            [{"id": "a", "name": "A", "guide_color": [{"color": "#FFF", "label": ""}]}],
            [{"name": "A", "guide_color": [{"color": "#FFF", "label": "x"}]}],
        ],
    )
    def test_invalid_documents(self, document):
        with pytest.raises(DatasetError):
            parse_legends(document)

    def test_duplicate_ids(self):
        legend = {"id": "a", "name": "A", "guide_color": [{"color": "#FFF", "label": "x"}]}
        with pytest.raises(DatasetError):
            parse_legends([legend, legend])

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "legend.json"
        path.write_text("[", encoding="utf-8")
        with pytest.raises(DatasetError):
            load_legends(path)


class TestSourceLoader:
    """Hazard tile sources."""

    def test_packaged_sources_match_legends(self, sources, legends):
        assert set(sources.layer_ids) == set(legends.layer_ids)

    def test_tile_url(self, sources):
        url = sources.get("flood_layer").tile_url(15, 29100, 12900)
        assert url == (
            "https://disaportaldata.gsi.go.jp/raster/"
            "01_flood_l2_shinsuishin_data/15/29100/12900.png"
        )

    def test_zoom_range(self, sources):
        source = sources.get("tsunami_layer")
        assert (source.min_zoom, source.max_zoom, source.tile_size) == (2, 17, 256)

    def test_from_dict_defaults(self):
        registry = HazardSourceRegistry.from_dict(
            {"sources": {"x": {"tiles": ["https://t/{z}/{x}/{y}.png"]}}}
        )
        source = registry.get("x")
        assert source.name == "x"
        assert (source.min_zoom, source.max_zoom, source.tile_size) == (0, 17, 256)

    @pytest.mark.parametrize(
        "data",
        [
            None,
            {"sources": []},
            {"sources": {"x": "https://t/{z}/{x}/{y}.png"}},
            {"sources": {"x": {"tiles": "u", "minzoom": 10, "maxzoom": 5}}},
            {"sources": {"x": {"tiles": "u", "tileSize": 0}}},
            {"sources": {"x": {"tiles": "u", "maxzoom": "high"}}},
        ],
    )
    def test_invalid_sources(self, data):
        with pytest.raises(DatasetError):
            HazardSourceRegistry.from_dict(data)

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "sources.yaml"
        path.write_text("sources: [unclosed", encoding="utf-8")
        with pytest.raises(DatasetError):
            load_sources(path)

    def test_load_missing(self, tmp_path):
        with pytest.raises(DatasetError):
            load_sources(tmp_path / "none.yaml")

    def test_packaged_file_exists(self):
        assert (DATA_DIR / "hazard_sources.yaml").exists()
