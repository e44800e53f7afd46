"""
Tests for hazard pixel classification.

- TestNearestLegendEntry: color matching against a legend
- TestPixelClassifier: end-to-end classification with a stub sampler
- TestClassifierDegradation: unavailable inputs yield no classification
- TestRedBlueLegend: two-color legend matching and transparency
- TestHighResolutionSource: 512px tiles read the clicked pixel
"""

import asyncio

import pytest

from conftest import StubSampler, mock_session, png_bytes
from hazardmap.data import HazardSource, HazardSourceRegistry, LegendCatalog
from hazardmap.data.legends import HazardLegend, LegendEntry
from hazardmap.errors import TileSampleError
from hazardmap.hazard import (
    HttpTilePixelSampler,
    PixelClassifier,
    classify_pixel,
    locate_pixel,
    nearest_legend_entry,
)


class TestNearestLegendEntry:
    """Nearest-color matching."""

    def test_exact_color(self, legends):
        flood = legends.get("flood_layer")
        for entry in flood.entries:
            assert nearest_legend_entry(entry.rgb, flood.entries) == entry

    def test_nearest_color(self, legends):
        flood = legends.get("flood_layer")
        assert nearest_legend_entry((255, 145, 140), flood.entries).label == "5.0〜10.0m"

    def test_tie_resolves_to_first(self):
        entries = (LegendEntry((0, 0, 0), "a"), LegendEntry((20, 0, 0), "b"))
        assert nearest_legend_entry((10, 0, 0), entries).label == "a"

    def test_empty_legend(self):
        assert nearest_legend_entry((1, 2, 3), ()) is None

    def test_classify_pixel_transparent(self, legends):
        assert classify_pixel((247, 245, 169, 0), legends.get("flood_layer")) is None

    def test_classify_pixel_opaque(self, legends):
        assert classify_pixel((247, 245, 169, 255), legends.get("flood_layer")).label == "0.5m未満"


class TestPixelClassifier:
    """Classification through the sampler capability."""

    @pytest.mark.asyncio
    async def test_classify_flood(self, sources, legends, stub_sampler):
        classifier = PixelClassifier(sources, legends, stub_sampler)
        result = await classifier.classify(139.47, 35.68, "flood_layer", 15.2)

        assert result is not None
        assert result.layer_id == "flood_layer"
        assert result.layer_name == legends.get("flood_layer").name
        assert result.label == "0.5m未満"
        assert result.to_dict()["color"] == "#F7F5A9"

    @pytest.mark.asyncio
    async def test_requests_rounded_zoom_tile(self, sources, legends, stub_sampler):
        classifier = PixelClassifier(sources, legends, stub_sampler)
        await classifier.classify(139.47, 35.68, "flood_layer", 15.6)

        url, col, row = stub_sampler.requests[0]
        assert "/16/" in url
        assert 0 <= col < 256
        assert 0 <= row < 256

    @pytest.mark.asyncio
    async def test_zoom_clamped_to_max(self, sources, legends, stub_sampler):
        classifier = PixelClassifier(sources, legends, stub_sampler)
        await classifier.classify(139.47, 35.68, "flood_layer", 19.4)
        assert "/17/" in stub_sampler.requests[0][0]

    def test_locate_pixel_matches_sampled_tile(self, sources):
        location = locate_pixel(sources.get("tsunami_layer"), 139.47, 35.68, 14)
        assert location.url.endswith(f"/14/{location.tile.x}/{location.tile.y}.png")
        assert location.bounds.contains(139.47, 35.68)

    @pytest.mark.asyncio
    async def test_transparent_pixel(self, sources, legends):
        sampler = StubSampler((0, 0, 0, 0))
        classifier = PixelClassifier(sources, legends, sampler)
        assert await classifier.classify(139.47, 35.68, "flood_layer", 15) is None


class TestClassifierDegradation:
    """Missing layers, legends and tiles never raise."""

    @pytest.mark.asyncio
    async def test_unknown_layer(self, sources, legends, stub_sampler):
        classifier = PixelClassifier(sources, legends, stub_sampler)
        assert await classifier.classify(139.47, 35.68, "nope", 15) is None
        assert stub_sampler.requests == []

    @pytest.mark.asyncio
    async def test_no_active_layer(self, sources, legends, stub_sampler):
        classifier = PixelClassifier(sources, legends, stub_sampler)
        assert await classifier.classify(139.47, 35.68, None, 15) is None

    @pytest.mark.asyncio
    async def test_missing_legend(self, stub_sampler):
        registry = HazardSourceRegistry(
            [HazardSource(layer_id="extra", name="extra", tiles=("https://tiles.test/{z}/{x}/{y}.png",))]
        )
        classifier = PixelClassifier(registry, LegendCatalog([]), stub_sampler)
        assert await classifier.classify(139.47, 35.68, "extra", 15) is None

    @pytest.mark.asyncio
    async def test_source_without_tiles(self, stub_sampler):
        registry = HazardSourceRegistry([HazardSource(layer_id="empty", name="empty", tiles=())])
        catalog = LegendCatalog([HazardLegend("empty", "empty", (LegendEntry((1, 1, 1), "x"),))])
        classifier = PixelClassifier(registry, catalog, stub_sampler)
        assert await classifier.classify(139.47, 35.68, "empty", 15) is None

    @pytest.mark.asyncio
    async def test_tile_unavailable(self, sources, legends):
        classifier = PixelClassifier(sources, legends, StubSampler(None))
        assert await classifier.classify(139.47, 35.68, "flood_layer", 15) is None

    @pytest.mark.asyncio
    async def test_sampler_error(self, sources, legends):
        class FailingSampler:
            async def sample(self, url, col, row, tile_size=None):
                raise TileSampleError(url, "HTTP 404")

        classifier = PixelClassifier(sources, legends, FailingSampler())
        assert await classifier.classify(139.47, 35.68, "flood_layer", 15) is None

    @pytest.mark.asyncio
    async def test_sampler_timeout(self, sources, legends):
        class SlowSampler:
            async def sample(self, url, col, row, tile_size=None):
                await asyncio.sleep(5)
                return (247, 245, 169, 255)

        classifier = PixelClassifier(sources, legends, SlowSampler(), timeout=0.01)
        assert await classifier.classify(139.47, 35.68, "flood_layer", 15) is None


class TestRedBlueLegend:
    """Two-color legend classification."""

    @pytest.mark.asyncio
    async def test_red_pixel(self):
        registry = HazardSourceRegistry(
            [HazardSource(layer_id="rb", name="rb", tiles=("https://tiles.test/{z}/{x}/{y}.png",))]
        )
        catalog = LegendCatalog(
            [HazardLegend("rb", "Red/Blue", (LegendEntry((255, 0, 0), "A"), LegendEntry((0, 0, 255), "B")))]
        )
        classifier = PixelClassifier(registry, catalog, StubSampler((255, 0, 0, 255)))
        result = await classifier.classify(0.5, 0.5, "rb", 10)
        assert result.label == "A"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rgb", [(255, 0, 0), (0, 0, 255), (12, 34, 56)])
    async def test_transparent_regardless_of_rgb(self, rgb):
        registry = HazardSourceRegistry(
            [HazardSource(layer_id="rb", name="rb", tiles=("https://tiles.test/{z}/{x}/{y}.png",))]
        )
        catalog = LegendCatalog(
            [HazardLegend("rb", "Red/Blue", (LegendEntry((255, 0, 0), "A"), LegendEntry((0, 0, 255), "B")))]
        )
        classifier = PixelClassifier(registry, catalog, StubSampler(rgb + (0,)))
        assert await classifier.classify(0.5, 0.5, "rb", 10) is None


class TestHighResolutionSource:
    """512px sources are sampled in their own pixel grid."""

    @pytest.mark.asyncio
    async def test_blue_pixel_under_click(self):
        source = HazardSource(
            layer_id="rb512", name="rb512", tiles=("https://tiles.test/{z}/{x}/{y}.png",), tile_size=512
        )
        catalog = LegendCatalog(
            [HazardLegend("rb512", "Red/Blue", (LegendEntry((255, 0, 0), "red"), LegendEntry((0, 0, 255), "blue")))]
        )
        location = locate_pixel(source, 139.47, 35.68, 15)
        assert location.tile_size == 512

        content = png_bytes(512, (255, 0, 0, 255), {(location.col, location.row): (0, 0, 255, 255)})
        sampler = HttpTilePixelSampler(session=mock_session(content=content))
        classifier = PixelClassifier(HazardSourceRegistry([source]), catalog, sampler)

        result = await classifier.classify(139.47, 35.68, "rb512", 15)
        assert result.label == "blue"

    @pytest.mark.asyncio
    async def test_tile_size_passed_to_sampler(self, legends):
        source = HazardSource(
            layer_id="flood_layer", name="flood", tiles=("https://tiles.test/{z}/{x}/{y}.png",), tile_size=512
        )
        sampler = StubSampler()
        classifier = PixelClassifier(HazardSourceRegistry([source]), legends, sampler)

        await classifier.classify(139.47, 35.68, "flood_layer", 15)
        assert sampler.tile_sizes == [512]
