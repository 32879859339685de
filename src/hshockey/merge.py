"""Regenerate the public JSON dataset from ``insert_<table>.sql`` dumps."""

from __future__ import annotations

import json
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .logging import get_logger
from .projector import DatasetProjector, ProjectedDataset
from .resolver import SourceRows, build_reference_tables
from .sql_inserts import SqlInsertParser

logger = get_logger(__name__)

# Player tables were exported in two halves; the second file is optional.
SOURCE_FILES: dict[str, tuple[str, ...]] = {
    "seasons": ("insert_seasons.sql",),
    "leagues": ("insert_leagues.sql",),
    "divisions": ("insert_divisions.sql",),
    "venues": ("insert_venues.sql",),
    "schools": ("insert_schools.sql",),
    "teams": ("insert_teams.sql",),
    "team_seasons": ("insert_team_seasons.sql",),
    "games": ("insert_games.sql",),
    "players": ("insert_players.sql", "insert_players_2019_2023.sql"),
    "player_seasons": ("insert_player_seasons.sql", "insert_player_seasons_2019_2023.sql"),
    "staff": ("insert_staff.sql",),
    "staff_teams": ("insert_staff_teams.sql",),
}

BACKUP_FILES = ("teams.json", "games.json", "players.json", "team_seasons.json", "leagues.json")


@dataclass(slots=True)
class MergeSummary:
    output_dir: Path
    counts: dict[str, int] = field(default_factory=dict)
    dropped_rows: dict[str, int] = field(default_factory=dict)
    missing_files: list[str] = field(default_factory=list)
    backup_dir: Path | None = None
    season_files: int = 0


def read_sql_file(input_dir: Path, filename: str) -> str:
    path = input_dir / filename
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8", errors="replace")


def load_source_rows(input_dir: Path, summary: MergeSummary | None = None) -> SourceRows:
    source = SourceRows()
    for table, filenames in SOURCE_FILES.items():
        rows: list[dict[str, Any]] = []
        dropped = 0
        for filename in filenames:
            sql = read_sql_file(input_dir, filename)
            if not sql:
                logger.warning("File not found or empty: {}", input_dir / filename)
                if summary is not None:
                    summary.missing_files.append(filename)
                continue
            parser = SqlInsertParser()
            parsed = parser.parse(sql)
            dropped += parser.rows_dropped
            logger.info("Parsed {}: {} rows ({} dropped)", filename, len(parsed), parser.rows_dropped)
            rows.extend(parsed)
        setattr(source, table, rows)
        if summary is not None:
            summary.dropped_rows[table] = dropped
    return source


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def backup_outputs(output_dir: Path) -> Path | None:
    existing = [output_dir / name for name in BACKUP_FILES if (output_dir / name).exists()]
    if not existing:
        return None
    backup_dir = output_dir / f"backup_{int(time.time() * 1000)}"
    backup_dir.mkdir(parents=True, exist_ok=True)
    for src in existing:
        shutil.copyfile(src, backup_dir / src.name)
    logger.info("Backed up {} existing file(s) to {}", len(existing), backup_dir)
    return backup_dir


def write_dataset(projected: ProjectedDataset, output_dir: Path) -> dict[str, int]:
    output_dir.mkdir(parents=True, exist_ok=True)
    teams = [t.to_dict() for t in projected.teams]
    files: dict[str, list[dict[str, Any]]] = {
        "seasons.json": [s.to_dict() for s in projected.seasons],
        "leagues.json": [l.to_dict() for l in projected.leagues],
        "divisions.json": [d.to_dict() for d in projected.divisions],
        "teams.json": teams,
        "team_seasons.json": teams,
        "games.json": [g.to_dict() for g in projected.games],
        "players.json": [p.to_dict() for p in projected.players],
        "venues.json": [v.to_dict() for v in projected.venues],
        "staff.json": [s.to_dict() for s in projected.staff],
    }
    counts: dict[str, int] = {}
    for filename, payload in files.items():
        _write_json(output_dir / filename, payload)
        counts[filename] = len(payload)
        logger.info("Written {} ({} records)", filename, len(payload))

    seasons_dir = output_dir / "seasons"
    seasons_dir.mkdir(parents=True, exist_ok=True)
    for season_id, bundle in projected.season_bundles.items():
        _write_json(seasons_dir / f"{season_id}.json", bundle.to_dict())
        logger.info(
            "Written seasons/{}.json ({} teams, {} games, {} players)",
            season_id,
            len(bundle.teams),
            len(bundle.games),
            len(bundle.players),
        )
    return counts


def run_merge(input_dir: str | Path, output_dir: str | Path, backup: bool = True) -> MergeSummary:
    input_path = Path(input_dir)
    output_path = Path(output_dir)
    summary = MergeSummary(output_dir=output_path)

    logger.info("Starting data merge from {}", input_path)
    source = load_source_rows(input_path, summary)
    logger.info("Source rows: {}", source.counts())
    refs = build_reference_tables(source)
    projected = DatasetProjector(refs).project()

    output_path.mkdir(parents=True, exist_ok=True)
    if backup:
        summary.backup_dir = backup_outputs(output_path)
    write_dataset(projected, output_path)

    summary.counts = {
        "seasons": len(projected.seasons),
        "leagues": len(projected.leagues),
        "divisions": len(projected.divisions),
        "team_seasons": len(projected.teams),
        "games": len(projected.games),
        "players": len(projected.players),
        "venues": len(projected.venues),
        "staff": len(projected.staff),
    }
    summary.season_files = len(projected.season_bundles)
    logger.info("Merge complete: {}", ", ".join(f"{k}={v}" for k, v in summary.counts.items()))
    return summary
