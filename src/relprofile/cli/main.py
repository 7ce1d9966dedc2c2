"""
Main command-line interface for relative profile collection.
"""

import configparser
import sys
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .. import __version__
from ..config.settings import CollectionConfig
from ..core.collector import RelativeDataCollector
from ..core.sources import DatasetSpec, TableScoreSource
from ..core.windows import plan_from_config
from ..exceptions import ConfigurationError, RelativeDataError
from ..io import feature_frame, is_enumerable_table, read_features, read_scores, write_table
from ..models.features import AggregationMethod, StrandSense
from ..models.result import RelativeDataResult
from ..utils import setup_logging, simplify_dataset_name


console = Console()

POSITION_CHOICES = {"5": "5", "3": "3", "4": "m", "m": "m", "p": "p"}
OPTION_FIELDS = {"strand": "strand_sense", "avtype": "avoid_types"}
# on/off switches only override other sources when switched on
SWITCHES = {"force_strand", "long_data", "interpolate", "summit_fallback", "enumerable"}


@click.group()
@click.version_option(version=__version__, prog_name="relprofile")
def cli():
    """Collect windowed data relative to a reference point of genomic features."""
    pass


def window_options(func):
    """Options shared by every command that lays out windows."""
    options = [
        click.option("--window", "window_size", type=int, help="Window size in bp (default 50)"),
        click.option("--number", "window_number", type=int, help="Number of windows on each side (default 20)"),
        click.option("--up", "up_number", type=int, help="Number of upstream windows"),
        click.option("--down", "down_number", type=int, help="Number of downstream windows"),
        click.option(
            "--position",
            type=click.Choice(sorted(POSITION_CHOICES)),
            help="Reference point: 5, 3, m (or 4) for the midpoint, p for the peak summit",
        ),
        click.option(
            "--method",
            type=click.Choice([m.value for m in AggregationMethod]),
            help="Method for combining scores in each window (default mean)",
        ),
        click.option(
            "--config",
            "config_file",
            type=click.Path(exists=True, path_type=Path),
            help="INI configuration file with a [Collection] section",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@cli.command()
@click.option(
    "--in",
    "input_file",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Feature file: BED, narrowPeak or tab-delimited table with a header",
)
@click.option(
    "--data",
    "data_files",
    required=True,
    multiple=True,
    type=click.Path(exists=True, path_type=Path),
    help="Score file: bedGraph or BED (can specify multiple)",
)
@click.option("--out", "output_file", type=click.Path(path_type=Path), help="Output file path")
@window_options
@click.option("--strand", type=click.Choice([s.value for s in StrandSense]), help="Stranded collection")
@click.option("--force-strand", is_flag=True, help="Use the strand column of the input file")
@click.option("--avoid/--noavoid", default=None, help="Null windows overlapping neighboring features")
@click.option("--avtype", help="Comma-delimited feature types to avoid")
@click.option("--long", "long_data", is_flag=True, help="Collect each window independently")
@click.option("--format", "decimal_format", type=int, help="Number of decimal places to keep")
@click.option("--smooth", "interpolate", is_flag=True, help="Interpolate missing values")
@click.option("--summit-fallback", is_flag=True, help="Use the midpoint when summits are missing")
@click.option("--count", "enumerable", is_flag=True, help="Scores are countable entries")
@click.option("--cpu", "workers", type=int, help="Number of parallel workers")
@click.option("--sum/--nosum", "write_summary", default=True, help="Write a summary profile file")
@click.option("--groups", is_flag=True, help="Write a column groups file")
@click.option("--gz", is_flag=True, help="Compress the output file")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option("--log-file", type=click.Path(path_type=Path), help="Log file path")
def collect(
    input_file: Path,
    data_files: List[Path],
    output_file: Optional[Path],
    config_file: Optional[Path],
    write_summary: bool,
    groups: bool,
    gz: bool,
    **options,
):
    """Collect windowed scores around each input feature."""

    try:
        config = build_config(config_file, **options)
    except (ConfigurationError, configparser.Error) as e:
        console.print(f"[red]Error loading configuration: {escape(str(e))}[/red]")
        sys.exit(1)

    logger = setup_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        log_format="console",
    )

    try:
        features = read_features(input_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error reading features from {input_file}: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"[bold blue]relprofile v{__version__}[/bold blue]")
    console.print(f"Features: {len(features)} from {input_file}")
    console.print(f"Datasets: {', '.join(str(d) for d in data_files)}")

    try:
        datasets = load_datasets(data_files, features, config)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error reading score data: {escape(str(e))}[/red]")
        sys.exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Collecting relative data...", total=None)
            result = RelativeDataCollector(config, logger).collect(features, datasets)
            progress.update(task, description="Collection completed successfully!")
    except RelativeDataError as e:
        console.print(f"[red]Collection failed: {escape(str(e))}[/red]")
        sys.exit(1)

    output_file = output_file or input_file.with_name(f"{_stem(input_file)}_relative.txt")
    written = write_outputs(result, features, output_file, write_summary, groups, gz)
    for path in written:
        console.print(f"[green]✓ Wrote {path}[/green]")

    display_results(result)


@cli.command()
@window_options
@click.option("--dataset", default="data", help="Dataset name used for column labels")
def plan(config_file: Optional[Path], dataset: str, **options):
    """Show the windows that would be collected."""

    try:
        config = build_config(config_file, **options)
    except (ConfigurationError, configparser.Error) as e:
        console.print(f"[red]Error loading configuration: {escape(str(e))}[/red]")
        sys.exit(1)

    windows = plan_from_config(config, dataset)
    table = Table(title=f"Window plan from the {config.position.description}")
    table.add_column("Index", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Start", justify="right")
    table.add_column("Stop", justify="right")
    table.add_column("Midpoint", justify="right")
    for window in windows:
        table.add_row(
            str(window.index), window.name, str(window.start), str(window.stop), str(window.midpoint)
        )
    console.print(table)
    display_config_summary(config)


def build_config(config_file: Optional[Path] = None, **options) -> CollectionConfig:
    """
    Build the collection configuration.

    Values come from the environment, then the INI file, then the command
    line; options left unset on the command line do not override earlier
    sources.

    Raises:
        ConfigurationError: if the combined values are not a valid request
    """
    values: Dict[str, Any] = {}
    if config_file:
        values.update(load_config_file(config_file))
    for key, value in options.items():
        if value is None or (key in SWITCHES and not value):
            continue
        if key == "position":
            value = POSITION_CHOICES[value]
        values[OPTION_FIELDS.get(key, key)] = value
    try:
        return CollectionConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def load_config_file(config_file_path: Path) -> Dict[str, str]:
    """Read the [Collection] section of an INI file."""
    parser = configparser.ConfigParser()
    with open(config_file_path) as handle:
        parser.read_file(handle)
    if not parser.has_section("Collection"):
        return {}
    return {key.lower(): value for key, value in parser.items("Collection")}


def load_datasets(data_files: List[Path], features, config: CollectionConfig) -> List[DatasetSpec]:
    """
    Wrap each score file as a dataset.

    The input features double as the neighbors checked for avoidance.
    """
    datasets = []
    for path in data_files:
        table = read_scores(path)
        enumerable = config.is_enumerable() or is_enumerable_table(path)
        datasets.append(DatasetSpec(
            name=str(path),
            factory=partial(
                TableScoreSource,
                table,
                neighbors=list(features) if config.avoid else None,
                enumerable=enumerable,
            ),
            enumerable=enumerable,
        ))
    return datasets


def write_outputs(
    result: RelativeDataResult,
    features,
    output_file: Path,
    write_summary: bool = True,
    groups: bool = False,
    gz: bool = False,
) -> List[Path]:
    """Write the data table and, as requested, the summary and column groups."""
    frame = result.to_frame().reset_index(drop=True)
    data = feature_frame(features).join(frame)
    written = [write_table(data, output_file, gz=gz)]

    stem = output_file.with_name(_stem(output_file))
    if write_summary and len(features):
        summary = result.summary_profile()
        written.append(write_table(summary, Path(f"{stem}_summary.txt")))
    if groups:
        written.append(write_table(result.column_groups(), Path(f"{stem}.col_groups.txt")))
    return written


def display_results(result: RelativeDataResult):
    """Display collection results in a formatted table."""

    console.print("\n[bold green]Collection Results[/bold green]")

    table = Table(title="Dataset Summary")
    table.add_column("Dataset", style="cyan")
    table.add_column("Strategy", style="magenta")
    table.add_column("Windows", justify="right")
    table.add_column("Empty Features", justify="right")
    table.add_column("Avoided Windows", justify="right")
    table.add_column("Null Cells", justify="right")

    for dataset in result.datasets:
        stats = dataset.stats
        table.add_row(
            simplify_dataset_name(dataset.dataset),
            dataset.strategy,
            str(len(dataset.windows)),
            str(stats.empty_features),
            str(stats.avoided_windows),
            f"{stats.null_cells} ({stats.null_fraction:.1%})",
        )

    console.print(table)
    console.print(f"Features: {len(result.feature_names)}  Workers: {result.workers}")


def display_config_summary(config: CollectionConfig):
    """Display configuration summary."""

    table = Table(title="Configuration Summary")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    for key, value in config.summary().items():
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)


def _stem(path: Path) -> str:
    """File name without its data and compression extensions."""
    name = path.name
    if name.endswith(".gz"):
        name = name[:-3]
    return name.rsplit(".", 1)[0] if "." in name else name


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
