"""Command-line entry point: read a race configuration and event log, print narration and standings.

Log text is printed verbatim (no rich markup or emoji codes); diagnostics go to stderr.
"""
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from .clock import FormatError, parse_clock
from .events import parse_event_lines
from .race import process_events
from .standings import render_report
from .validation import ConfigError, load_config

DEFAULT_CONFIG_PATH = Path("sunny_5_skiers/config.json")
DEFAULT_EVENTS_PATH = Path("sunny_5_skiers/events")

app = typer.Typer(
    name="biathlon-results",
    help="Biathlon race log interpreter - lap times, penalties and final standings",
    add_completion=False,
)

console = Console(highlight=False, soft_wrap=True, emoji=False)
err_console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)


@app.command()
def results(
    config_path: Path = typer.Argument(DEFAULT_CONFIG_PATH, help="Race configuration (JSON)"),
    events_path: Path = typer.Argument(DEFAULT_EVENTS_PATH, help="Race event log"),
    narration: bool = typer.Option(True, help="Print commentary for every processed event"),
    evaluated_at: Optional[str] = typer.Option(
        None,
        help="Clock time (HH:MM:SS.mmm) used to close start windows; defaults to the last event",
    ),
    log_level: str = typer.Option("WARNING", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
):
    """Interpret a race log and print the final standings."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    try:
        config = load_config(config_path)
    except OSError as e:
        err_console.print(f"[red]Error opening configuration file:[/] {escape(str(e))}")
        raise typer.Exit(1)
    except ConfigError as e:
        err_console.print(f"[red]Error parsing configuration:[/] {escape(str(e))}")
        raise typer.Exit(1)

    evaluation_instant = None
    if evaluated_at is not None:
        try:
            evaluation_instant = parse_clock(evaluated_at)
        except FormatError as e:
            err_console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)

    try:
        with events_path.open(encoding="utf-8") as events_file:
            parsed = parse_event_lines(events_file)
    except OSError as e:
        err_console.print(f"[red]Error opening events file:[/] {escape(str(e))}")
        raise typer.Exit(1)
    except UnicodeDecodeError as e:
        err_console.print(f"[red]Error reading events:[/] {escape(str(e))}")
        raise typer.Exit(1)

    for line_no, message in parsed.errors:
        err_console.print(f"[yellow]Error parsing event (line {line_no}):[/] {escape(message)}")

    outcome = process_events(parsed.events, config, evaluated_at=evaluation_instant)

    if narration:
        for item in outcome.narration:
            console.print(item.render(), markup=False)

    console.print("\n[bold]Final Results:[/]")
    for line in render_report(outcome.competitors, config):
        console.print(line, markup=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
