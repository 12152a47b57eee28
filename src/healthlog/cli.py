"""
Command-line interface for Healthlog.

Provides commands for saving health snapshots and reviewing their history.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from healthlog import __version__
from healthlog.codec import MAX_SNAPSHOTS, SnapshotRecord
from healthlog.collectors import COLLECTORS, get_collector
from healthlog.config import Config
from healthlog.core import HealthLog
from healthlog.errors import HealthlogError, StorageUnavailableError
from healthlog.timeline import TimelineRow, health_band, score_label
from healthlog.trend import Trend, TrendReport

console = Console()

BAND_STYLES = {
    "good": "bold green",
    "fair": "bold yellow",
    "poor": "bold red",
    "unknown": "dim",
}

TREND_STYLES = {
    Trend.UNCHANGED: "white",
    Trend.WORSE: "bold red",
    Trend.IMPROVED: "bold green",
}


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging with rich handler."""
    handlers: list[logging.Handler] = [RichHandler(console=console, rich_tracebacks=True)]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
    )


@click.group()
@click.version_option(version=__version__, prog_name="healthlog")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "-V",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """
    Healthlog - System health snapshot history.

    Save periodic health snapshots and review how the system changes over time.
    """
    ctx.ensure_object(dict)

    # Load configuration
    if config:
        ctx.obj["config"] = Config.load(config)
    else:
        ctx.obj["config"] = Config.load()

    # Set log level
    log_level = "DEBUG" if verbose else ctx.obj["config"].log_level
    setup_logging(log_level, ctx.obj["config"].log_file)
    ctx.obj["verbose"] = verbose


def _no_storage(error: StorageUnavailableError) -> None:
    console.print(f"[red]✗ {error}[/]")
    console.print("[dim]Insert a removable device or configure 'history.paths'.[/]")
    sys.exit(1)


@main.command()
@click.option(
    "--source",
    "-s",
    help="Metrics collector to use (see 'healthlog list')",
)
@click.option(
    "--metrics-file",
    "-m",
    type=click.Path(exists=True, path_type=Path),
    help="YAML metrics file (implies --source file)",
)
@click.pass_context
def save(ctx: click.Context, source: str | None, metrics_file: Path | None) -> None:
    """
    Collect and save a health snapshot.

    The snapshot is appended to the history file; once the history holds
    50 snapshots the oldest one is dropped.
    """
    config: Config = ctx.obj["config"]

    if metrics_file:
        config.metrics_file = str(metrics_file)
        config.metrics_source = source or "file"
    elif source:
        config.metrics_source = source

    if get_collector(config.metrics_source) is None:
        console.print(f"[red]Error: Unknown metrics source: {config.metrics_source}[/]")
        console.print("Run [cyan]healthlog list[/] to see available collectors.")
        sys.exit(2)

    try:
        result = HealthLog(config).save_snapshot()
    except StorageUnavailableError as e:
        _no_storage(e)
        return
    except HealthlogError as e:
        console.print(f"[red]✗ {e}[/]")
        sys.exit(1)
    except (OSError, ValueError) as e:
        console.print(f"[red]✗ Metrics collection failed: {e}[/]")
        sys.exit(1)

    if result.success:
        console.print(
            f"[green]✓ Snapshot #{result.run_number} saved "
            f"({result.count} total on record)[/]"
        )
        if ctx.obj["verbose"]:
            console.print(f"  File: {result.location}")
    else:
        console.print(f"[red]✗ Snapshot #{result.run_number} could not be written to {result.location}[/]")
        sys.exit(1)


@main.command()
@click.pass_context
def review(ctx: click.Context) -> None:
    """
    Review the latest snapshot and changes since the previous run.
    """
    config: Config = ctx.obj["config"]

    try:
        history = HealthLog(config).review()
    except StorageUnavailableError:
        console.print("[red]✗ No history file found on any configured device[/]")
        console.print()
        console.print("Run [cyan]healthlog save[/] at least twice to start tracking changes.")
        sys.exit(1)

    if history.count == 0:
        console.print("[yellow]History file is empty or corrupted[/]")
        console.print("Run [cyan]healthlog save[/] to start building history.")
        return

    console.print()
    console.print(
        Panel.fit(
            f"[bold blue]Healthlog v{__version__}[/]\n"
            f"{history.count} snapshot(s) on record\nFile: {history.location}",
            border_style="blue",
        )
    )

    _display_latest(history.latest)

    if history.trend:
        _display_trend(history.trend)
    else:
        console.print()
        console.print("[dim]Only 1 snapshot recorded. Save again later to start seeing trends.[/]")

    if history.timeline:
        console.print()
        _display_timeline(history.timeline)

    console.print()
    console.print("[green]✓ History review complete[/]")


@main.command()
@click.pass_context
def timeline(ctx: click.Context) -> None:
    """Show the health score timeline of the most recent snapshots."""
    config: Config = ctx.obj["config"]

    try:
        rows = HealthLog(config).render_timeline()
    except StorageUnavailableError as e:
        _no_storage(e)
        return

    if not rows:
        console.print("[yellow]At least two snapshots are needed for a timeline.[/]")
        return

    _display_timeline(rows)


def _display_latest(latest: SnapshotRecord) -> None:
    """Display a summary table of the latest snapshot."""
    table = Table(title=f"Latest Snapshot (Run #{latest.run_number})", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    table.add_row("Clusters Used", str(latest.clusters_used))
    table.add_row("Inodes Used", str(latest.inodes_used))

    style = BAND_STYLES[health_band(latest.health_score)]
    table.add_row("Health Score", f"[{style}]{score_label(latest.health_score)}[/]")

    table.add_row(
        "Firmware",
        f"{latest.firmware_total} total, {latest.firmware_stub} stubs, "
        f"{latest.firmware_custom} custom",
    )
    table.add_row(
        "Storage",
        f"Primary: {'Yes' if latest.has_primary_device else 'No'}  "
        f"Secondary: {'Yes' if latest.has_secondary_device else 'No'}",
    )
    table.add_row("Input Devices", f"{latest.input_count_a} / {latest.input_count_b}")

    console.print()
    console.print(table)


def _display_trend(report: TrendReport) -> None:
    """Display the comparison with the previous snapshot and any alerts."""
    table = Table(
        title=f"Changes Since Previous Run (Run #{report.previous_run} vs Run #{report.current_run})",
        show_header=True,
    )
    table.add_column("Metric", style="cyan")
    table.add_column("Previous", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Trend", justify="center")

    for metric in report.metrics:
        style = TREND_STYLES[metric.trend]
        table.add_row(
            metric.label,
            str(metric.previous),
            str(metric.current),
            f"[{style}]{metric.trend.value}[/]",
        )

    console.print()
    console.print(table)

    if report.alerts:
        console.print()
        for alert in report.alerts:
            color = "red" if alert.severity == "error" else "yellow"
            console.print(f"[{color}]! {alert.message}[/]")
            console.print(f"  [dim]{alert.hint}[/]")


def _display_timeline(rows: list[TimelineRow]) -> None:
    """Display the compact timeline table."""
    table = Table(title="Health Score Timeline", show_header=True)
    table.add_column("Run", justify="right", style="cyan")
    table.add_column("Clusters", justify="right")
    table.add_column("Inodes", justify="right")
    table.add_column("Score", justify="right")

    for row in rows:
        style = BAND_STYLES[row.band]
        table.add_row(
            str(row.run_number),
            str(row.clusters_used),
            str(row.inodes_used),
            f"[{style}]{row.score_label}[/]",
        )

    console.print(table)


@main.command("list")
def list_available() -> None:
    """List all available metrics collectors."""
    table = Table(title="Available Collectors", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for name, cls in COLLECTORS.items():
        table.add_row(name, cls.description)

    console.print()
    console.print(table)


@main.command("version", short_help="Display version information")
def version() -> None:
    """Display version information for Healthlog."""
    console.print()
    console.print(
        Panel.fit(
            f"[bold blue]Healthlog[/]\nVersion: [cyan]{__version__}[/]",
            border_style="blue",
            title="Version Information",
        )
    )
    console.print()

    table = Table(show_header=False, box=None)
    table.add_column("Component", style="dim", width=20)
    table.add_column("Version", style="cyan")

    table.add_row("Healthlog", __version__)
    table.add_row("Python", f"{sys.version.split()[0]}")

    console.print(table)
    console.print()


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show current configuration and history location."""
    config: Config = ctx.obj["config"]

    console.print()
    console.print(
        Panel.fit(
            "[bold]Healthlog Status[/]",
            border_style="blue",
        )
    )

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    for i, path in enumerate(config.history_paths, 1):
        table.add_row(f"Candidate {i}", path)
    table.add_row("Metrics Source", config.metrics_source)
    table.add_row("Metrics File", config.metrics_file or "[dim]Not set[/]")
    table.add_row("Storage Path", config.storage_path)
    table.add_row("Log Level", config.log_level)

    console.print(table)
    console.print()

    try:
        store = HealthLog(config).load()
    except StorageUnavailableError:
        console.print("[red]✗ No storage available for history tracking[/]")
        return

    console.print(f"[green]✓ History file: {store.location}[/]")
    console.print(f"  {len(store)} of {MAX_SNAPSHOTS} snapshot(s) on record")


@main.command()
@click.argument("output_path", type=click.Path(path_type=Path))
def init_config(output_path: Path) -> None:
    """
    Generate a sample configuration file.

    Creates a YAML configuration file with all available options
    and helpful comments.
    """
    sample_config = """# Healthlog Configuration
# See documentation for full options

# History storage
history:
  # Candidate history files, in order of preference.
  # The first one that already holds history wins; otherwise the first
  # writable one is used.
  paths:
    - /media/sd/healthlog-history.dat
    - /media/usb/healthlog-history.dat

# Metrics collection
metrics:
  # Collector to use: host, file
  source: host

  # YAML metrics file for the 'file' collector
  file: null

  # Filesystem whose usage is tracked by the 'host' collector
  storage_path: /

  # Bytes per cluster when converting usage to clusters
  cluster_size: 16384

# Logging
logging:
  # Log level: DEBUG, INFO, WARNING, ERROR
  level: INFO

  # Log file path (null = stderr only)
  file: null
"""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(sample_config)
    console.print(f"[green]✓ Configuration file created: {output_path}[/]")
    console.print()
    console.print("Next steps:")
    console.print("  1. Edit the history paths to match your removable devices")
    console.print("  2. Save a snapshot: [cyan]healthlog save[/]")
    console.print("  3. Review changes later: [cyan]healthlog review[/]")


if __name__ == "__main__":
    main()
