#!/usr/bin/env python3
"""Demo of a map session driven by simulated map events (offline)."""

import asyncio
from pathlib import Path

from hazardmap import MapSession
from hazardmap.config import HazardMapSettings

SAMPLE_SHELTERS = Path(__file__).parent / "shelters_sample.geojson"


class FixedColorSampler:
    """Returns one legend color instead of fetching tiles."""

    async def sample(self, url, col, row, tile_size=None):
        print(f"    (would fetch {url} pixel {col},{row})")
        return (255, 216, 192, 255)


async def main():
    """Walk through the interactions a user has with the map."""
    print("=" * 80)
    print("Hazard Map Session Demo")
    print("=" * 80)
    print()

    settings = HazardMapSettings(shelters_path=SAMPLE_SHELTERS)
    session = MapSession.from_settings(FixedColorSampler(), settings=settings)

    # Example 1: Search box
    print("1. SHELTER SEARCH")
    print("-" * 80)
    for place in session.forward_geocode("立川　市役所"):
        print(f"  • {place.label}  {place.center}")
    for place in session.reverse_geocode([35.70, 139.41]):
        print(f"  • {place.label}")
    print()

    # Example 2: Shelter popup
    print("2. SHELTER POPUP")
    print("-" * 80)
    details = await session.on_click(139.4131, 35.7139, zoom=15, shelter_index=0)
    print(f"  {details.name} ({details.address})")
    for label in details.accessibility:
        print(f"    - {label}")
    print()

    # Example 3: Hazard classification
    print("3. HAZARD CLASSIFICATION (flood)")
    print("-" * 80)
    legend = session.select_hazard_layer("flood_layer")
    print(f"  Legend: {legend.name}")
    result = await session.on_click(139.415, 35.700, zoom=15.4)
    if result:
        print(f"  {result.layer_name}: {result.label}")
    print()

    # Example 4: Distance measurement
    print("4. DISTANCE MEASUREMENT")
    print("-" * 80)
    for lng, lat in [(139.4131, 35.7139), (139.4194, 35.7057), (139.4233, 35.6914)]:
        session.on_right_click(lng, lat)
    for point in session.measurer.points:
        print(f"  {point.coordinates}  {point.distance or 'start'}")
    print()

    # Example 5: Reach areas
    print("5. SHELTER REACH AREAS (500 m)")
    print("-" * 80)
    visible = session.shelters.coordinates()
    print(f"  zoom 12: {session.on_radius_change(500, 12, visible)}")
    geojson = session.on_radius_change(500, 14, visible)
    print(f"  zoom 14: {len(geojson['features'])} polygon(s)")
    print()


if __name__ == "__main__":
    asyncio.run(main())
