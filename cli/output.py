"""
Shared output helpers for CLI commands.

Tables render through rich; JSON goes to stdout or a file.
"""

import json
from pathlib import Path
from typing import Any, List, Optional, Sequence

import click
from rich.console import Console
from rich.table import Table

OUTPUT_FORMATS = ["table", "json"]


def format_option(func):
    """Attach the shared ``--format`` option."""
    return click.option(
        "--format",
        "-f",
        "output_format",
        type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
        default="table",
        help="Output format (default: table).",
    )(func)


def print_table(title: str, headers: Sequence[str], rows: List[Sequence[Any]]) -> None:
    """Render rows as a rich table on stdout."""
    table = Table(title=title)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(value) for value in row])
    Console(soft_wrap=True).print(table)


def output_json(data: Any, output_path: Optional[Path] = None) -> None:
    """Write ``data`` as indented JSON to a file or stdout."""
    json_str = json.dumps(data, indent=2, ensure_ascii=False)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(json_str)
        click.echo(f"Results saved to: {output_path}")
    else:
        click.echo(json_str)
