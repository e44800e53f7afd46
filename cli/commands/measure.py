"""
Geometry Commands - Measure paths and compute shelter reach areas.

Usage:
    hazardmap measure 139.70,35.68 139.71,35.69 139.72,35.69
    hazardmap --shelters shelters.geojson reach --radius 500 --bbox 139.6,35.6,139.8,35.8
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import click
from pyproj import Geod

from hazardmap.measure import DistanceMeasurer
from hazardmap.reach import ReachAreaBuilder, ReachLayer

from cli.output import format_option, output_json, print_table

logger = logging.getLogger("hazardmap.cli.measure")


def parse_point(value: str) -> Tuple[float, float]:
    """Parse ``"lng,lat"``."""
    parts = value.split(",")
    if len(parts) != 2:
        raise click.BadParameter(f"Point must be LNG,LAT: {value}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        raise click.BadParameter(f"Point must be numeric LNG,LAT: {value}")


def parse_bbox(value: Optional[str]) -> Optional[Tuple[float, float, float, float]]:
    """Parse ``"min_lng,min_lat,max_lng,max_lat"``."""
    if value is None:
        return None
    try:
        parts = [float(x.strip()) for x in value.split(",")]
    except ValueError:
        raise click.BadParameter(f"Bounding box must be numeric: {value}")
    if len(parts) != 4:
        raise click.BadParameter(
            "Bounding box must have 4 values: min_lng,min_lat,max_lng,max_lat"
        )
    return parts[0], parts[1], parts[2], parts[3]


@click.command("measure")
@click.argument("points", nargs=-1, required=True)
@format_option
def measure(points: Tuple[str, ...], output_format: str):
    """
    Measure a path through POINTS given as LNG,LAT.

    \b
    Examples:
        hazardmap measure 139.70,35.68 139.71,35.69
        hazardmap measure 139.70,35.68 139.71,35.69 139.72,35.69 -f json
    """
    coords: List[Tuple[float, float]] = [parse_point(p) for p in points]

    measurer = DistanceMeasurer()
    geojson = None
    for lng, lat in coords:
        geojson = measurer.toggle_vertex(lng, lat)

    if output_format == "json":
        output_json(geojson)
        return

    print_table(
        "Measured path",
        ["#", "Lng", "Lat", "Distance"],
        [
            [i + 1, point.coordinates[0], point.coordinates[1], point.distance or "-"]
            for i, point in enumerate(measurer.points)
        ],
    )
    if len(measurer) >= 2:
        click.echo(f"Total: {measurer.points[-1].distance}")


@click.command("reach")
@click.option(
    "--radius",
    "-r",
    type=click.FloatRange(min=0),
    required=True,
    help="Walking radius around each shelter, in metres.",
)
@click.option(
    "--bbox",
    "-b",
    default=None,
    help="Only shelters inside min_lng,min_lat,max_lng,max_lat.",
)
@format_option
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(path_type=Path),
    help="Output file path for the reach GeoJSON.",
)
@click.pass_obj
def reach(ctx, radius: float, bbox: Optional[str], output_format: str, output_path: Optional[Path]):
    """
    Compute the area within RADIUS metres of any shelter.

    \b
    Examples:
        hazardmap --shelters shelters.geojson reach --radius 500
        hazardmap --shelters shelters.geojson reach -r 1000 -b 139.6,35.6,139.8,35.8 -o reach.geojson
    """
    box = parse_bbox(bbox)
    shelters = ctx.shelters
    records = shelters.within_bbox(box) if box else list(shelters)

    layer = ReachLayer(ReachAreaBuilder(segments=ctx.settings.reach_segments))
    if not layer.update([record.coordinates for record in records], radius):
        click.echo("No shelters in the selected area.")
        return

    if output_format == "json" or output_path:
        output_json(layer.to_geojson(), output_path)
        return

    geod = Geod(ellps="WGS84")
    rows = []
    for i, part in enumerate(layer.area.geoms):
        area_m2, _ = geod.geometry_area_perimeter(part)
        rows.append([i + 1, len(part.exterior.coords) - 1, f"{abs(area_m2) / 1e6:.3f}"])

    print_table(
        f"Reach area ({len(records)} shelters, {radius:.0f}m)",
        ["Part", "Vertices", "Area (km²)"],
        rows,
    )
