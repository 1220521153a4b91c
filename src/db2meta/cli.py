"""
Command-line interface for db2meta.

Provides run, schemas, and extract commands for exporting DB2 catalog
metadata as catalog importer CSV.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import List

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from db2meta import __version__
from db2meta.errors import (
    ConfigParseError,
    ConfigReadError,
    ConfigurationError,
    Db2MetaError,
    ExtractionCancelled,
)
from db2meta.metadata import get_extractor
from db2meta.models import ExtractionConfig, Metadata
from db2meta.output import CsvSink

console = Console()

# Exit codes, one per failing stage
EXIT_CONFIG_READ = 2
EXIT_CONFIG_PARSE = 3
EXIT_SCHEMA_DISCOVERY = 4
EXIT_CONFIG_WRITE = 5
EXIT_OUTPUT_CREATE = 6
EXIT_EXTRACTION = 7
EXIT_CANCELLED = 130


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def fail(message: str, code: int) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
    sys.exit(code)


def load_config(path: Path) -> ExtractionConfig:
    """Load the run configuration, exiting with the stage's code on failure."""
    try:
        return ExtractionConfig.load(path)
    except ConfigReadError as e:
        fail(str(e), EXIT_CONFIG_READ)
    except ConfigParseError as e:
        fail(str(e), EXIT_CONFIG_PARSE)


def build_extractor(config: ExtractionConfig):
    try:
        return get_extractor(config)
    except ConfigurationError as e:
        fail(str(e), EXIT_CONFIG_PARSE)


def discover_schemas(config: ExtractionConfig) -> List[str]:
    """List the owning schemas in the configured catalog."""
    extractor = build_extractor(config)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Reading schemas from {config.system_schema}...", total=None)
        try:
            schemas = extractor.find_schemas(config.dsn())
        except Db2MetaError as e:
            fail(f"Schema discovery failed: {e}", EXIT_SCHEMA_DISCOVERY)
        progress.update(task, completed=True)
    return schemas


class ProgressSink:
    """Forwards tables to a sink while reporting the count on a progress task."""

    def __init__(self, sink: CsvSink, progress: Progress, task):
        self.sink = sink
        self.progress = progress
        self.task = task

    def write(self, meta: Metadata) -> None:
        self.sink.write(meta)
        self.progress.update(
            self.task,
            description=f"Extracting... {self.sink.tables_written} tables ({meta.formal_name})",
        )


def extract_to(config: ExtractionConfig, output: Path) -> int:
    """Extract the configured schemas into `output`; returns the table count."""
    if not config.target_schema:
        fail("targetSchema is empty; run `db2meta schemas` to list candidates", EXIT_CONFIG_PARSE)

    extractor = build_extractor(config)

    try:
        out = open(output, "w", newline="", encoding="utf-8")
    except OSError as e:
        fail(f"Cannot create {output}: {e}", EXIT_OUTPUT_CREATE)

    cancel = threading.Event()
    with out, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Extracting...", total=None)
        sink = ProgressSink(CsvSink(out), progress, task)
        try:
            written = extractor.run(config.dsn(), sink, cancel=cancel)
        except (KeyboardInterrupt, ExtractionCancelled):
            cancel.set()
            fail("Extraction cancelled", EXIT_CANCELLED)
        except Db2MetaError as e:
            fail(f"Extraction failed: {e}", EXIT_EXTRACTION)
        progress.update(task, completed=True)

    return written


def print_schemas(config: ExtractionConfig, schemas: List[str]) -> None:
    table = Table(title=f"Schemas in {config.system_schema}")
    table.add_column("#", style="yellow", justify="right")
    table.add_column("Schema", style="cyan")
    for i, schema in enumerate(schemas, 1):
        table.add_row(str(i), schema)
    console.print(table)


@click.group()
@click.version_option(version=__version__, prog_name="db2meta")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=Path("config.json"),
    show_default=True,
    help="Run configuration (JSON, or YAML by .yaml/.yml suffix)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path) -> None:
    """
    db2meta - DB2 catalog metadata exporter

    Reads table and column metadata from the SYSCAT (LUW), SYSIBM (z/OS) or
    QSYS2 (IBM i) catalog and writes it as catalog importer CSV.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """
    Discover schemas on first use, extract on later runs.

    With an empty targetSchema the schemas found in the catalog are written
    back into the configuration file for editing; otherwise the listed
    schemas are extracted into csvfile.

    Example:

        db2meta --config config.json run
    """
    config_path = ctx.obj["config_path"]
    config = load_config(config_path)

    if not config.target_schema:
        schemas = discover_schemas(config)
        config.target_schema = schemas
        try:
            config.save(config_path)
        except OSError as e:
            fail(f"Cannot write {config_path}: {e}", EXIT_CONFIG_WRITE)

        print_schemas(config, schemas)
        console.print(
            f"\n[green]Wrote {len(schemas)} schemas to targetSchema in {config_path}[/green]"
        )
        console.print("Remove the schemas you do not need, then run again.")
        return

    written = extract_to(config, Path(config.csvfile))
    console.print(f"\n[green]Extracted {written} tables to {config.csvfile}[/green]")
    console.print(f"Let's import {config.csvfile} into Mashu (^^)b")


@cli.command()
@click.pass_context
def schemas(ctx: click.Context) -> None:
    """
    List the schemas in the catalog without touching the configuration.

    Example:

        db2meta --config config.json schemas
    """
    config = load_config(ctx.obj["config_path"])
    found = discover_schemas(config)
    print_schemas(config, found)


@cli.command()
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output CSV path (defaults to csvfile from the configuration)",
)
@click.pass_context
def extract(ctx: click.Context, output: Path) -> None:
    """
    Extract the configured target schemas into a CSV file.

    Example:

        db2meta --config config.json extract --output catalog.csv
    """
    config = load_config(ctx.obj["config_path"])
    output = output or Path(config.csvfile)

    written = extract_to(config, output)
    console.print(f"\n[green]Extracted {written} tables to {output}[/green]")


if __name__ == "__main__":
    cli()
