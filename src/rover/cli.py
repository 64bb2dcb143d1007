"""
Command-line interface for Rover.

Provides commands for collecting diagnostics, archiving them, and uploading
the archive.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from rover import __version__
from rover.collectors import COLLECTORS, CollectionReport, CollectionStatus
from rover.config import Config
from rover.core import Rover
from rover.errors import RoverError
from rover.runner import Outcome

console = Console()

EXIT_FAILURE = 1
EXIT_NOT_RUNNING = 3


def setup_logging(level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _fail(message: str, code: int = EXIT_FAILURE) -> None:
    console.print(f"[red]✗ {message}[/]")
    sys.exit(code)


def _rover(ctx: click.Context) -> Rover:
    try:
        return Rover(ctx.obj["config"])
    except RoverError as e:
        _fail(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="rover")
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
    Rover - diagnostic bundle collection.

    Gather operating system, Consul, Nomad and Vault diagnostics into a
    per-host directory, then archive and upload it.
    """
    ctx.ensure_object(dict)

    if config:
        ctx.obj["config"] = Config.load(config)
    else:
        ctx.obj["config"] = Config.load()

    log_level = "DEBUG" if verbose else ctx.obj["config"].log_level
    setup_logging(log_level)
    ctx.obj["verbose"] = verbose


def _run_collector(ctx: click.Context, name: str) -> None:
    rover = _rover(ctx)
    label = "system" if name == "system" else name.capitalize()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Gathering {label} data, please wait ...", total=None)
        try:
            report = rover.collect(name)
        except RoverError as e:
            progress.update(task, completed=True)
            _fail(str(e))
        progress.update(task, completed=True)

    if report.status is CollectionStatus.SKIPPED:
        console.print(f"[yellow]{label} process not detected in this environment.[/]")
        if report.reason:
            console.print(f"[dim]{report.reason}[/]")
        sys.exit(EXIT_NOT_RUNNING)

    _display_summary(report, rover.layout.category_dir(name), rover.layout.log_file)


def _display_summary(report: CollectionReport, out_dir: Path, log_file: Path) -> None:
    """Overall outcome of a collection; per-command detail lives in the run log."""
    captured = report.count(Outcome.SUCCESS) + report.count(Outcome.NONZERO_EXIT)
    missing = report.count(Outcome.NOT_FOUND)
    problems = len(report.failures) - missing

    console.print(f"[green]✓ Executed {report.category} commands and stored output in {out_dir}[/]")
    console.print(
        f"[dim]  {captured} captured, {missing} not available, "
        f"{problems} with errors, {len(report.skipped)} skipped[/]"
    )
    console.print(f"[dim]  Details: {log_file}[/]")


@main.command()
@click.pass_context
def system(ctx: click.Context) -> None:
    """Execute operating system commands and store output."""
    _run_collector(ctx, "system")


@main.command()
@click.pass_context
def consul(ctx: click.Context) -> None:
    """Execute Consul related commands and store output."""
    _run_collector(ctx, "consul")


@main.command()
@click.pass_context
def nomad(ctx: click.Context) -> None:
    """Execute Nomad related commands and store output."""
    _run_collector(ctx, "nomad")


@main.command()
@click.pass_context
def vault(ctx: click.Context) -> None:
    """Execute Vault related commands and store output."""
    _run_collector(ctx, "vault")


@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Output basic system factoids and running service versions."""
    rover = _rover(ctx)

    console.print()
    console.print(Panel.fit("[bold]Basic factoids about this system[/]", border_style="blue"))

    table = Table(show_header=False, box=None)
    table.add_column("Fact", style="dim")
    table.add_column("Value", style="cyan")
    for key, value in rover.host.describe().items():
        table.add_row(f"{key}:", value)
    console.print(table)

    probes = rover.service_versions()
    if probes:
        console.print()
        console.print("[bold]Active running versions:[/]")
        versions = Table(show_header=False, box=None)
        versions.add_column("Service", style="dim")
        versions.add_column("Version", style="cyan")
        for name, probe in probes.items():
            versions.add_row(f"{name.capitalize()} version:", probe.version or "unknown")
        console.print(versions)
    console.print()


@main.command()
@click.option(
    "--path",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory where the archive file is written",
)
@click.option(
    "--keep-data",
    is_flag=True,
    help="Keep the collected data directory after archiving",
)
@click.pass_context
def archive(ctx: click.Context, path: Path | None, keep_data: bool) -> None:
    """
    Archive collected data into a zip file.

    The archive is named rover-<hostname>-<timestamp>.zip.
    """
    rover = _rover(ctx)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Archiving data, please wait ...", total=None)
        try:
            target = rover.archive(path, True if keep_data else None)
        except RoverError as e:
            progress.update(task, completed=True)
            _fail(str(e))
        progress.update(task, completed=True)

    console.print(f"[green]✓ Data archived in {target}[/]")


@main.command()
@click.option(
    "--file",
    "-f",
    "archive_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Archive file to upload (defaults to the newest archive for this host)",
)
@click.pass_context
def upload(ctx: click.Context, archive_file: Path | None) -> None:
    """Upload an archive file to an S3 bucket."""
    rover = _rover(ctx)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Uploading archive ...", total=None)
        try:
            result = rover.upload(archive_file)
        except RoverError as e:
            progress.update(task, completed=True)
            _fail(str(e))
        progress.update(task, completed=True)

    console.print(f"[green]✓ Success! Uploaded s3://{result.bucket}/{result.key}[/]")
    if ctx.obj["verbose"]:
        console.print(f"  {result.size} bytes in {result.duration_ms:.0f}ms")


@main.command("list")
def list_available() -> None:
    """List all available collectors."""
    table = Table(title="Available Collectors", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for name, cls in COLLECTORS.items():
        table.add_row(name, cls.description)

    console.print()
    console.print(table)


@main.command()
@click.argument("output_path", type=click.Path(path_type=Path))
def init_config(output_path: Path) -> None:
    """
    Generate a sample configuration file.

    Creates a YAML configuration file with all available options
    and helpful comments.
    """
    sample_config = """# Rover Configuration

# Collection settings
collection:
  # Directory under which <hostname>/<category>/ captures are written
  output_dir: .

  # Override the detected host name
  hostname: null

  # Seconds before a single diagnostic command is killed (0 = no limit)
  command_timeout: 60

  # Commands run in parallel (1 = strictly sequential)
  workers: 1

# Archive settings
archive:
  # Directory where rover-<hostname>-<timestamp>.zip is written
  dir: .

  # Keep the collected data directory after archiving
  keep_data: false

# Upload settings (credentials come from AWS_ACCESS_KEY_ID and
# AWS_SECRET_ACCESS_KEY only)
aws:
  bucket: null
  region: null
  prefix: ""

# Logging
log:
  # Log level: DEBUG, INFO, WARNING, ERROR
  level: INFO
"""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(sample_config)
    console.print(f"[green]✓ Configuration file created: {output_path}[/]")


if __name__ == "__main__":
    main()
