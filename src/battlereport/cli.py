"""
BattleReport CLI - Command Line Interface for round narratives

Provides commands for:
- Building a battle report from a round report JSON file
- Showing just the round summary
- Generating a default configuration file
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from battlereport import __version__
from battlereport.analysis.events import filter_events
from battlereport.analysis.models import BattleEvent, BattleReport, Highlight, RoundSummary
from battlereport.core.config import generate_default_config, get_config, load_config, set_config
from battlereport.core.errors import SnapshotValidationError
from battlereport.core.parser import load_round_report
from battlereport.core.utils import configure_logging
from battlereport.export import export_report
from battlereport.pipeline.orchestrator import build_report

app = typer.Typer(
    name="battlereport",
    help="Turn a round's leaderboard snapshots into a play-by-play battle report",
    add_completion=False,
)
console = Console()

logger = logging.getLogger(__name__)

EVENT_STYLES = {
    "kill": "green",
    "death": "red",
    "objective": "magenta",
    "spawn": "blue",
    "first_blood": "bold red",
    "killing_spree": "bold yellow",
    "spree_ended": "dim",
    "lead_change": "bold magenta",
    "domination": "bold cyan",
    "revenge": "cyan",
    "system": "yellow",
}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]BattleReport[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output"
    )
) -> None:
    """BattleReport - Round Narrative Engine"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _load_and_build(round_path: Path, config_path: Optional[Path]) -> BattleReport:
    config = load_config(config_path)
    configure_logging(config.logging)
    set_config(config)

    try:
        snapshots, meta = load_round_report(round_path)
        return build_report(snapshots, meta, config)
    except SnapshotValidationError as e:
        console.print(f"[red]Invalid round report:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def report(
    round_path: Path = typer.Argument(
        ...,
        help="Path to the round report JSON file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report to a file (format from extension: .json, .csv)"
    ),
    highlights_only: bool = typer.Option(
        False,
        "--highlights-only",
        help="Only show highlighted events in the feed"
    ),
    hide_joins: bool = typer.Option(
        False,
        "--hide-joins",
        help="Hide player join (spawn) events"
    ),
    hide_deaths: bool = typer.Option(
        False,
        "--hide-deaths",
        help="Hide death events"
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (YAML, TOML or JSON)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Build and display the battle report of a round.

    Shows the play-by-play event feed, the round highlights and the
    summary. Feed filters only affect the display, never the export.
    """
    battle = _load_and_build(round_path, config_path)

    feed = filter_events(
        battle.events,
        show_join_events=not hide_joins,
        show_death_events=not hide_deaths,
        highlights_only=highlights_only,
    )
    _display_events(feed)
    _display_highlights(battle.highlights)
    _display_summary(battle.summary)

    for warning in battle.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    if output:
        export_config = get_config().export
        if not output.suffix:
            output = output.with_suffix(f".{export_config.default_format}")
        try:
            export_report(
                battle,
                output,
                indent=export_config.json_indent,
                delimiter=export_config.csv_delimiter,
                include_metadata=export_config.include_metadata,
            )
        except ValueError as e:
            console.print(f"[red]Export failed:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[green]Report written to[/green] {output}")


@app.command()
def summary(
    round_path: Path = typer.Argument(
        ...,
        help="Path to the round report JSON file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (YAML, TOML or JSON)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Show only the summary of a round."""
    battle = _load_and_build(round_path, config_path)
    _display_summary(battle.summary)


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(
        Path("battlereport.yaml"),
        help="Where to write the configuration (.yaml or .json)"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file"
    ),
) -> None:
    """Write a default configuration file."""
    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)

    try:
        generate_default_config(path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Wrote default config to[/green] {path}")


@app.command()
def info() -> None:
    """
    Display information about BattleReport and the environment.
    """
    import platform as plat

    console.print(f"\n[bold blue]BattleReport[/bold blue] v{__version__}\n")

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Python", plat.python_version())
    table.add_row("Platform", plat.system())
    table.add_row("Architecture", plat.machine())

    config = load_config()
    table.add_row("Lead gap", str(config.narrative.lead_gap_threshold))
    table.add_row("Status interval", str(config.narrative.status_interval))
    table.add_row("Strict validation", str(config.narrative.strict_validation))

    console.print(table)


def _display_events(events: list[BattleEvent]) -> None:
    """Display the event feed table."""
    if not events:
        console.print("[yellow]No events in this round[/yellow]")
        return

    table = Table(title="Battle Feed")
    table.add_column("Time", style="cyan")
    table.add_column("Event")
    table.add_column("Message")

    for event in events:
        style = EVENT_STYLES.get(event.type.value, "")
        message = escape(event.message)
        if event.is_highlight:
            message = f"[bold]{message}[/bold]"
        table.add_row(
            event.timestamp.strftime("%H:%M:%S"),
            f"[{style}]{event.type.value}[/{style}]" if style else event.type.value,
            message,
        )

    console.print(table)
    console.print()


def _display_highlights(highlights: list[Highlight]) -> None:
    """Display the highlights table."""
    if not highlights:
        return

    table = Table(title="Highlights")
    table.add_column("Time", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Player", style="green")
    table.add_column("Description")

    for h in highlights:
        table.add_row(
            h.timestamp.strftime("%H:%M:%S"),
            h.type.value,
            escape(h.participant),
            escape(h.description),
        )

    console.print(table)
    console.print()


def _display_summary(round_summary: RoundSummary) -> None:
    """Display the round summary panel."""
    lines = [
        f"[cyan]Duration:[/cyan] {round_summary.duration_label}",
        f"[cyan]Participants:[/cyan] {round_summary.participant_count}",
        f"[cyan]Kills / Deaths:[/cyan] {round_summary.total_kills} / {round_summary.total_deaths}",
        f"[cyan]Average K/D:[/cyan] {round_summary.average_kd:.2f}",
        f"[cyan]Lead changes:[/cyan] {round_summary.lead_change_count}",
        f"[cyan]Closest gap:[/cyan] {round_summary.closest_gap}",
    ]
    if round_summary.mvp:
        mvp = round_summary.mvp
        lines.append(
            f"[cyan]MVP:[/cyan] {escape(mvp.player_name)} ({mvp.score} pts, {mvp.kills}/{mvp.deaths}, K/D {mvp.kd:.2f})"
        )
    if round_summary.longest_streak:
        streak = round_summary.longest_streak
        lines.append(f"[cyan]Longest streak:[/cyan] {escape(streak.player_name)} ({streak.streak})")
    if round_summary.first_blood:
        fb = round_summary.first_blood
        lines.append(
            f"[cyan]First blood:[/cyan] {escape(fb.player_name)} at {fb.timestamp.strftime('%H:%M:%S')}"
        )

    console.print(
        Panel(
            "\n".join(lines),
            title="[bold blue]Round Summary[/bold blue]",
            expand=False,
        )
    )


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
