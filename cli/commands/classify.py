"""
Hazard Commands - Classify hazard tile pixels and list hazard layers.

Usage:
    hazardmap classify 139.47 35.68 --layer flood_layer --zoom 15
    hazardmap layers --format json
"""

import asyncio
import logging
from typing import Optional

import click

from hazardmap.hazard import HazardClassification, HttpTilePixelSampler, PixelClassifier

from cli.output import format_option, output_json, print_table

logger = logging.getLogger("hazardmap.cli.classify")


async def run_classification(ctx, lng: float, lat: float, layer_id: str, zoom: float) -> Optional[HazardClassification]:
    """Classify one point against live hazard tiles."""
    settings = ctx.settings
    async with HttpTilePixelSampler(
        timeout=settings.tile_timeout_seconds,
        user_agent=settings.user_agent,
    ) as sampler:
        classifier = PixelClassifier(
            ctx.sources,
            ctx.legends,
            sampler,
            timeout=settings.tile_timeout_seconds,
        )
        return await classifier.classify(lng, lat, layer_id, zoom)


@click.command("classify")
@click.argument("lng", type=float)
@click.argument("lat", type=float)
@click.option(
    "--layer",
    "-l",
    "layer_id",
    required=True,
    help="Hazard layer id (see `hazardmap layers`).",
)
@click.option(
    "--zoom",
    "-z",
    type=click.FloatRange(min=0),
    default=15.0,
    help="Map zoom to sample at (default: 15).",
)
@format_option
@click.pass_obj
def classify(ctx, lng: float, lat: float, layer_id: str, zoom: float, output_format: str):
    """
    Read the hazard category at a point.

    Fetches the hazard tile under LNG/LAT and matches the pixel color to the
    layer's legend.

    \b
    Examples:
        hazardmap classify 139.47 35.68 --layer flood_layer
        hazardmap classify 139.47 35.68 --layer tsunami_layer --zoom 13.6
    """
    if layer_id not in ctx.sources:
        raise click.BadParameter(
            f"Unknown layer {layer_id!r}. Available: {', '.join(ctx.sources.layer_ids)}",
            param_hint="--layer",
        )

    result = asyncio.run(run_classification(ctx, lng, lat, layer_id, zoom))

    if output_format == "json":
        output_json({"lng": lng, "lat": lat, "result": result.to_dict() if result else None})
        return

    if result is None:
        click.echo("No hazard category at this point.")
        return

    click.echo(f"{result.layer_name}: {result.label}")


@click.command("layers")
@format_option
@click.pass_obj
def layers(ctx, output_format: str):
    """List hazard layers and their legends."""
    rows = []
    for source in ctx.sources:
        legend = ctx.legends.get(source.layer_id)
        rows.append(
            {
                "id": source.layer_id,
                "name": legend.name if legend else source.name,
                "zoom": [source.min_zoom, source.max_zoom],
                "legend": [entry.to_dict() for entry in legend.entries] if legend else [],
            }
        )

    if output_format == "json":
        output_json({"count": len(rows), "layers": rows})
        return

    print_table(
        "Hazard layers",
        ["Id", "Name", "Zoom", "Categories"],
        [
            [
                row["id"],
                row["name"],
                f"{row['zoom'][0]}-{row['zoom'][1]}",
                ", ".join(entry["label"] for entry in row["legend"]) or "-",
            ]
            for row in rows
        ],
    )
