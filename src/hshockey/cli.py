"""Command-line entrypoint.

Example:
    $ hshockey merge --input output_final --output data
    $ hshockey standings --season 11 --gender F
    $ hshockey serve --port 8000
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from .archive import initial_state, select_filter
from .config import get_settings
from .filters import default_season_id
from .loader import DatasetLoadError, load_from_json
from .logging import setup_logging
from .merge import run_merge
from .standings import StandingsGroup, build_standings, format_win_pct

console = Console()

app = typer.Typer(
    name="hshockey",
    help="High school hockey archive: data merge, standings and read-only API",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-V", help="Enable debug logging")] = False,
    log_to_file: Annotated[bool, typer.Option("--log-to-file", help="Also write rotated JSON logs")] = False,
) -> None:
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_dir=settings.log_dir if log_to_file else None,
    )


def format_standings(groups: list[StandingsGroup]) -> str:
    lines: list[str] = []
    for group in groups:
        lines.append(group.league_name)
        lines.append("Pos Team                     GP  W  L  T  Pts  GF  GA  GD   Win%")
        for idx, team in enumerate(group.teams, start=1):
            rec = team.overall
            lines.append(
                f"{idx:>3} {team.team_name[:24]:<24} {rec.games_played:>2} {rec.wins:>2} {rec.losses:>2} {rec.ties:>2}"
                f" {rec.points:>4} {rec.goals_for:>3} {rec.goals_against:>3} {rec.goal_diff:>3} {format_win_pct(rec):>6}"
            )
        lines.append("")
    return "\n".join(lines).rstrip("\n")


@app.command("merge")
def merge(
    input_dir: Annotated[
        Path | None,
        typer.Option("--input", "-i", help="Directory holding insert_<table>.sql files"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Directory the JSON dataset is written to"),
    ] = None,
    backup: Annotated[
        bool,
        typer.Option("--backup/--no-backup", help="Copy existing output files to backup_<ms>/ first"),
    ] = True,
) -> None:
    """Regenerate the JSON dataset from SQL insert dumps."""
    settings = get_settings()
    source = input_dir or settings.input_path
    target = output_dir or settings.data_path
    if not source.is_dir():
        console.print(f"[red]Error: input directory not found: {source}[/red]")
        raise typer.Exit(1)

    summary = run_merge(source, target, backup=backup)

    table = Table(title="Merge Summary")
    table.add_column("Collection", style="cyan")
    table.add_column("Records", justify="right")
    table.add_column("Dropped rows", justify="right")
    for name, count in summary.counts.items():
        table.add_row(name, str(count), str(summary.dropped_rows.get(name, 0)))
    console.print(table)
    console.print(f"Season files: {summary.season_files}")
    if summary.backup_dir is not None:
        console.print(f"Backup: {summary.backup_dir}")
    if summary.missing_files:
        console.print(f"[yellow]Missing input files: {', '.join(summary.missing_files)}[/yellow]")


@app.command("standings")
def standings(
    season: Annotated[str | None, typer.Option("--season", "-s", help="Season id (default: 2018-2019)")] = None,
    gender: Annotated[str, typer.Option("--gender", "-g", help="M or F")] = "",
    data_dir: Annotated[Path | None, typer.Option("--data", "-d", help="Merged JSON directory")] = None,
) -> None:
    """Print league standings for one season."""
    settings = get_settings()
    try:
        dataset = load_from_json(data_dir or settings.data_path)
    except DatasetLoadError as exc:
        console.print(f"[red]Failed to load data: {exc}[/red]")
        raise typer.Exit(1) from exc

    state = initial_state(dataset, season_id=season if season is not None else default_season_id(dataset.seasons))
    if gender:
        state = select_filter(state, "gender", gender.upper())
    groups = build_standings(state.view.teams)
    if not groups:
        console.print("[yellow]No teams match these filters.[/yellow]")
        return
    typer.echo(format_standings(groups))


@app.command("serve")
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port")] = 8000,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on code changes")] = False,
) -> None:
    """Serve the read-only JSON API."""
    import uvicorn

    uvicorn.run("hshockey.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
