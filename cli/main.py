"""
Hazard Map CLI entry point.

Defines the ``hazardmap`` click group and the context object shared by all
commands. Datasets are loaded lazily so commands that need only the packaged
legend and source documents work without a shelter file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from hazardmap.config import HazardMapSettings, LogLevel, get_settings
from hazardmap.data import (
    HazardSourceRegistry,
    LegendCatalog,
    ShelterDataset,
    load_legends,
    load_shelters,
    load_sources,
)
from hazardmap.errors import DatasetError

from cli.commands.classify import classify, layers
from cli.commands.measure import measure, reach
from cli.commands.search import reverse, search

logger = logging.getLogger("hazardmap.cli")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging on stderr for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


class CLIContext:
    """Settings and lazily loaded datasets shared by commands."""

    def __init__(self, settings: HazardMapSettings):
        self.settings = settings
        self._shelters: Optional[ShelterDataset] = None
        self._legends: Optional[LegendCatalog] = None
        self._sources: Optional[HazardSourceRegistry] = None

    def _load(self, loader, path):
        try:
            return loader(path)
        except DatasetError as e:
            raise click.ClickException(str(e)) from e

    @property
    def shelters(self) -> ShelterDataset:
        if self._shelters is None:
            path = self.settings.shelters_path
            if path is None:
                raise click.UsageError(
                    "No shelter dataset. Pass --shelters or set HAZARDMAP_SHELTERS_PATH."
                )
            self._shelters = self._load(load_shelters, path)
        return self._shelters

    @property
    def legends(self) -> LegendCatalog:
        if self._legends is None:
            self._legends = self._load(load_legends, self.settings.legends_path)
        return self._legends

    @property
    def sources(self) -> HazardSourceRegistry:
        if self._sources is None:
            self._sources = self._load(load_sources, self.settings.sources_path)
        return self._sources


@click.group()
@click.option(
    "--shelters",
    "shelters_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Shelter GeoJSON document (overrides HAZARDMAP_SHELTERS_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    default=None,
    help="Logging level (default: from settings).",
)
@click.version_option(package_name="hazardmap")
@click.pass_context
def cli(ctx, shelters_path: Optional[Path], log_level: Optional[str]):
    """
    Shelter and hazard map tools.

    Search evacuation shelters, read hazard categories from GSI hazard
    tiles, measure paths and compute shelter reach areas.
    """
    settings = get_settings()
    if shelters_path is not None:
        settings = settings.model_copy(update={"shelters_path": shelters_path})

    configure_logging(log_level or settings.log_level.value)
    ctx.obj = CLIContext(settings)


cli.add_command(search)
cli.add_command(reverse)
cli.add_command(classify)
cli.add_command(layers)
cli.add_command(measure)
cli.add_command(reach)


if __name__ == "__main__":
    cli()
