"""
Search Commands - Find shelters by name or address, interpret coordinates.

Usage:
    hazardmap --shelters shelters.geojson search 市役所
    hazardmap --shelters shelters.geojson search "ｼﾔｸｼﾖ" --limit 5 --format json
    hazardmap reverse 35.68 139.70
"""

import logging
from pathlib import Path
from typing import Optional

import click

from hazardmap.search import FuzzySearchIndex, GeocodeAdapter

from cli.output import format_option, output_json, print_table

logger = logging.getLogger("hazardmap.cli.search")


@click.command("search")
@click.argument("query")
@click.option(
    "--limit",
    "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of results (default: all matches).",
)
@click.option(
    "--threshold",
    "-t",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Fuzzy match threshold, 0 = exact only (default: from settings).",
)
@format_option
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(path_type=Path),
    help="Output file path for results (JSON format).",
)
@click.pass_obj
def search(
    ctx,
    query: str,
    limit: Optional[int],
    threshold: Optional[float],
    output_format: str,
    output_path: Optional[Path],
):
    """
    Search shelters by name or address.

    The query is normalized (width, kana and case folding) and matched
    fuzzily against shelter names and addresses.

    \b
    Examples:
        hazardmap --shelters shelters.geojson search 市役所
        hazardmap --shelters shelters.geojson search しやくしよ --limit 3
    """
    threshold = ctx.settings.search_threshold if threshold is None else threshold
    index = FuzzySearchIndex(ctx.shelters, threshold=threshold)
    hits = index.search_hits(query, limit=limit)

    if output_format == "json" or output_path:
        output_json(
            {
                "query": query,
                "count": len(hits),
                "results": [
                    {
                        "index": hit.record.index,
                        "name": hit.record.name,
                        "address": hit.record.address,
                        "coordinates": list(hit.record.coordinates),
                        "score": round(hit.score, 4),
                        "matched": hit.matched_field.value,
                    }
                    for hit in hits
                ],
            },
            output_path,
        )
        return

    if not hits:
        click.echo(f"No shelters match {query!r}.")
        return

    print_table(
        f"Shelters matching {query!r}",
        ["#", "Name", "Address", "Lng", "Lat", "Score"],
        [
            [
                hit.record.index,
                hit.record.name,
                hit.record.address,
                f"{hit.record.longitude:.6f}",
                f"{hit.record.latitude:.6f}",
                f"{hit.score:.2f}",
            ]
            for hit in hits
        ],
    )


@click.command("reverse")
@click.argument("first", type=float)
@click.argument("second", type=float)
@format_option
def reverse(first: float, second: float, output_format: str):
    """
    Interpret two numbers as a coordinate.

    The order of latitude and longitude is inferred; when both orders are
    plausible both candidates are listed.

    \b
    Examples:
        hazardmap reverse 35.68 139.70
        hazardmap reverse -- 139.70 -35.68
    """
    adapter = GeocodeAdapter(FuzzySearchIndex([]))
    places = adapter.reverse_geocode((first, second))

    if output_format == "json":
        output_json({"count": len(places), "results": [p.to_feature() for p in places]})
        return

    print_table(
        "Coordinate candidates",
        ["Label", "Lng", "Lat"],
        [[p.label, p.longitude, p.latitude] for p in places],
    )
