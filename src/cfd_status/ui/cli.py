"""Typer-based command line interface for the CFD progress monitor."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..core.errors import ObservationError
from ..core.monitor import Monitor
from ..models.settings import ConfigError, MonitorSettings, load_settings
from ..utils.formatting import format_duration

app = typer.Typer(help="Poll CFD solver logs and report progress and ETA per case")
console = Console()
err_console = Console(stderr=True)

LOGGER = logging.getLogger(__name__)

CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="YAML file listing the cases (defaults to the built-in batch)."
)
ROOT_OPTION = typer.Option(None, "--root", help="Override the directory holding the case folders.")
INTERVAL_OPTION = typer.Option(None, "--interval", help="Override the update interval in seconds.")
EXTRACTOR_OPTION = typer.Option(None, "--extractor", help="Log reader: direct | grep")
LOG_LEVEL_OPTION = typer.Option("WARNING", "--log-level", help="Logging level for diagnostics on stderr.")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _resolve_settings(
    config: Optional[Path],
    *,
    root: Optional[Path] = None,
    interval: Optional[int] = None,
    extractor: Optional[str] = None,
    isolate_failures: bool = False,
    measured: bool = False,
) -> MonitorSettings:
    """Load settings and apply command line overrides."""
    try:
        settings = load_settings(config)
        overrides: Dict[str, Any] = {}
        if root is not None:
            overrides["root_dir"] = root
        if interval is not None:
            overrides["update_time_seconds"] = interval
        if extractor is not None:
            overrides["extractor"] = extractor.lower()
        if isolate_failures:
            overrides["failure_policy"] = "isolate"
        if measured:
            overrides["elapsed_mode"] = "measured"
        if overrides:
            settings = MonitorSettings.model_validate({**settings.model_dump(), **overrides})
    except ConfigError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        # pydantic.ValidationError from the overrides
        err_console.print(f"[red]Invalid option: {escape(str(exc))}[/red]")
        raise typer.Exit(code=2) from exc
    if not settings.cases:
        err_console.print("[red]No cases configured.[/red]")
        raise typer.Exit(code=2)
    LOGGER.info("Using %d case(s) under %s", len(settings.cases), settings.root_dir)
    return settings


def _show_screen(text: str) -> None:
    console.clear()
    console.print(text, markup=False, highlight=False, soft_wrap=True)


@app.command()
def watch(
    config: Optional[Path] = CONFIG_OPTION,
    root: Optional[Path] = ROOT_OPTION,
    interval: Optional[int] = INTERVAL_OPTION,
    extractor: Optional[str] = EXTRACTOR_OPTION,
    isolate_failures: bool = typer.Option(
        False, "--isolate-failures", help="Keep polling other cases when one log fails."
    ),
    measured: bool = typer.Option(
        False, "--measured", help="Use measured wall-clock time between observations."
    ),
    once: bool = typer.Option(False, "--once", help="Render the table once and exit."),
    log_level: str = LOG_LEVEL_OPTION,
) -> None:
    """Refresh every case each interval and redraw the status table."""
    _configure_logging(log_level)
    settings = _resolve_settings(
        config,
        root=root,
        interval=interval,
        extractor=extractor,
        isolate_failures=isolate_failures,
        measured=measured,
    )
    monitor = Monitor.from_settings(settings)
    try:
        monitor.run(_show_screen, max_cycles=1 if once else None)
    except ObservationError as exc:
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        raise typer.Exit(code=0)


@app.command()
def check(
    config: Optional[Path] = CONFIG_OPTION,
    root: Optional[Path] = ROOT_OPTION,
    extractor: Optional[str] = EXTRACTOR_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
) -> None:
    """Read every log once and report the latest step of each case."""
    _configure_logging(log_level)
    settings = _resolve_settings(config, root=root, extractor=extractor, isolate_failures=True)
    monitor = Monitor.from_settings(settings)
    failed = monitor.poll()

    table = Table(title="Case status", show_lines=False)
    table.add_column("Case")
    table.add_column("Step", justify="right")
    table.add_column("Sim. time", justify="right")
    table.add_column("Target steps", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Status")
    for tracker in monitor.trackers:
        if tracker.last_error is not None:
            table.add_row(
                tracker.name,
                "-",
                "-",
                f"{tracker.total_steps}",
                "-",
                f"[red]{escape(tracker.last_error.message)}[/red]",
            )
            continue
        table.add_row(
            tracker.name,
            f"{tracker.current_step}",
            f"{tracker.current_time:.2f}",
            f"{tracker.total_steps}",
            f"{tracker.progress_fraction() * 100:.1f}%",
            "[green]ok[/green]",
        )
    console.print(table)
    if failed:
        err_console.print(f"[yellow]{len(failed)} of {len(monitor.trackers)} case(s) failed.[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def cases(
    config: Optional[Path] = CONFIG_OPTION,
    root: Optional[Path] = ROOT_OPTION,
    interval: Optional[int] = INTERVAL_OPTION,
) -> None:
    """List configured cases with their resolved log files."""
    settings = _resolve_settings(config, root=root, interval=interval)
    table = Table(title=f"Cases under {settings.root_dir}", show_lines=False)
    table.add_column("Case")
    table.add_column("Duration", justify="right")
    table.add_column("Steps", justify="right")
    table.add_column("Log file")
    table.add_column("Exists", justify="center")
    for tracker in Monitor.from_settings(settings).trackers:
        table.add_row(
            tracker.name,
            f"{tracker.case.duration}",
            f"{tracker.total_steps}",
            str(tracker.log_path),
            "yes" if tracker.log_path.exists() else "no",
        )
    console.print(table)
    console.print(
        f"Update interval: {format_duration(settings.update_time_seconds)} "
        f"| sampling rate: {settings.sampling_rate_hz} Hz | extractor: {settings.extractor}"
    )


def main() -> None:
    """Entry point for CLI execution."""
    app()


if __name__ == "__main__":
    main()
