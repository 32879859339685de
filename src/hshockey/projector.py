from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .config import POSITION_LABELS, RECORD_SCOPES
from .models import (
    Dataset,
    Division,
    Game,
    League,
    PlayerSeason,
    Record,
    Season,
    Staff,
    StaffAssignment,
    TeamSeason,
    Venue,
    as_float,
    as_int,
    str_id,
)
from .resolver import ReferenceTables, Row, normalize_gender, season_label

_CAPTAIN_FLAGS = {"Y", "YES", "C", "A", "1", "TRUE", "T"}


@dataclass(slots=True)
class SeasonBundle:
    id: str
    name: str
    display_name: str
    teams: list[TeamSeason] = field(default_factory=list)
    games: list[Game] = field(default_factory=list)
    players: list[PlayerSeason] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "teams": [t.to_dict() for t in self.teams],
            "games": [g.to_dict() for g in self.games],
            "players": [p.to_dict() for p in self.players],
        }


@dataclass(slots=True)
class ProjectedDataset:
    seasons: list[Season]
    leagues: list[League]
    divisions: list[Division]
    venues: list[Venue]
    teams: list[TeamSeason]
    games: list[Game]
    players: list[PlayerSeason]
    staff: list[Staff]
    season_bundles: dict[str, SeasonBundle]

    @property
    def dataset(self) -> Dataset:
        return Dataset(
            seasons=self.seasons,
            leagues=self.leagues,
            divisions=self.divisions,
            teams=self.teams,
            games=self.games,
            players=self.players,
            staff=self.staff,
            venues=self.venues,
        )


def game_timestamp(value: Any) -> int | None:
    """UTC seconds at noon of the game date, or None when the date is unusable."""
    if not value:
        return None
    try:
        day = datetime.strptime(str(value).strip()[:10], "%Y-%m-%d")
    except ValueError:
        return None
    return int(day.replace(hour=12, tzinfo=timezone.utc).timestamp())


def position_label(code: Any, label: Any = None) -> str:
    text = str(code or "").strip().upper()
    if text in POSITION_LABELS:
        return POSITION_LABELS[text]
    if label:
        return str(label)
    if code:
        return str(code)
    return "-"


def captain_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().upper() in _CAPTAIN_FLAGS


def jersey_number(value: Any) -> int | None:
    if value is None or value == "":
        return None
    number = as_int(value, default=-1)
    return number if number >= 0 else None


class DatasetProjector:
    """Turns resolved source rows into the public JSON shapes.

    Output order always follows source row order, and nothing here mutates
    ``refs``; projecting twice yields equal results.
    """

    def __init__(self, refs: ReferenceTables) -> None:
        self.refs = refs

    def seasons(self) -> list[Season]:
        out: list[Season] = []
        for row in self.refs.source.seasons:
            name = str(row.get("name") or "")
            out.append(
                Season(
                    id=str_id(row.get("id")) or "",
                    name=name,
                    display_name=season_label(name),
                    legacy_id=str_id(row.get("legacy_id")),
                    start_year=row.get("start_year"),
                    end_year=row.get("end_year"),
                    start_date=row.get("start_date"),
                    end_date=row.get("end_date"),
                )
            )
        return out

    def leagues(self) -> list[League]:
        return [
            League(
                id=str_id(row.get("id")) or "",
                name=str(row.get("name") or ""),
                short_name=row.get("short_name"),
                gender=normalize_gender(row.get("gender")),
                legacy_id=str_id(row.get("legacy_id")),
            )
            for row in self.refs.source.leagues
        ]

    def divisions(self) -> list[Division]:
        return [
            Division(id=str_id(row.get("id")) or "", name=str(row.get("name") or ""))
            for row in self.refs.source.divisions
        ]

    def venues(self) -> list[Venue]:
        return [
            Venue(
                id=str_id(row.get("id")) or "",
                name=row.get("name"),
                city=row.get("city"),
                address=row.get("address"),
            )
            for row in self.refs.source.venues
        ]

    def _record(self, row: Row, prefix: str) -> Record:
        return Record.build(
            wins=row.get(f"{prefix}wins"),
            losses=row.get(f"{prefix}losses"),
            ties=row.get(f"{prefix}ties"),
            goals_for=row.get(f"{prefix}goals_for"),
            goals_against=row.get(f"{prefix}goals_against"),
            points=row.get(f"{prefix}points"),
        )

    def team_season(self, row: Row) -> TeamSeason:
        refs = self.refs
        team_id = str_id(row.get("team_id"))
        league_id = str_id(row.get("league_id"))
        league = refs.league(league_id)
        gender = refs.team_gender(team_id)
        if gender is None and league is not None:
            gender = normalize_gender(league.get("gender"))
        records = {scope: self._record(row, prefix) for scope, prefix in RECORD_SCOPES}
        return TeamSeason(
            id=str_id(row.get("id")) or "",
            team_id=team_id,
            team_name=refs.team_name(team_id),
            season_id=str_id(row.get("season_id")),
            season_name=refs.season_name(row.get("season_id")),
            gender=gender,
            league_id=league_id,
            league_name=refs.league_name(league_id),
            division_id=str_id(row.get("division_id")),
            division_name=refs.division_name(row.get("division_id")),
            **records,
        )

    def teams(self) -> list[TeamSeason]:
        return [self.team_season(row) for row in self.refs.source.team_seasons]

    def game(self, row: Row) -> Game:
        refs = self.refs
        season_id = str_id(row.get("season_id"))
        home_id = str_id(row.get("home_team_id"))
        away_id = str_id(row.get("away_team_id"))
        venue_id = str_id(row.get("venue_id") or row.get("location_id"))
        date = row.get("game_date") or row.get("date")
        counts = row.get("counts_for_record")
        return Game(
            id=str_id(row.get("id")) or "",
            season_id=season_id,
            season_name=refs.season_name(season_id),
            date=date,
            timestamp=game_timestamp(date),
            home_team_id=home_id,
            home_team=refs.team_name(home_id),
            home_team_season_id=(
                str_id(row.get("home_team_season_id")) or refs.team_season_id_for(home_id, season_id)
            ),
            home_score=None if row.get("home_score") is None else as_int(row.get("home_score")),
            away_team_id=away_id,
            away_team=refs.team_name(away_id),
            away_team_season_id=(
                str_id(row.get("away_team_season_id")) or refs.team_season_id_for(away_id, season_id)
            ),
            away_score=None if row.get("away_score") is None else as_int(row.get("away_score")),
            venue=refs.venue_name(venue_id) or row.get("venue"),
            location_id=venue_id,
            event_desc=row.get("event_desc"),
            status=str(row.get("status") or 1),
            do_not_include_in_record=1 if counts is False or counts == 0 else 0,
            exempt_home_team=1 if row.get("exempt_home") else 0,
            exempt_visit_team=1 if row.get("exempt_away") else 0,
        )

    def games(self) -> list[Game]:
        return [self.game(row) for row in self.refs.source.games]

    def player_season(self, row: Row) -> PlayerSeason:
        refs = self.refs
        player = refs.player(row.get("player_id")) or {}
        team_season = refs.team_season(row.get("team_season_id")) or {}
        team_id = str_id(team_season.get("team_id") or row.get("team_id"))
        season_id = str_id(team_season.get("season_id") or row.get("season_id"))
        first = str(player.get("first_name") or "").strip()
        last = str(player.get("last_name") or "").strip()
        goals = as_int(row.get("goals"))
        assists = as_int(row.get("assists"))
        return PlayerSeason(
            id=str_id(row.get("id")) or "",
            player_id=str_id(row.get("player_id")),
            first_name=first,
            last_name=last,
            name=f"{first} {last}".strip(),
            position=position_label(row.get("position"), row.get("position_name")),
            team_id=team_id,
            team_name=refs.team_name(team_id),
            team_season_id=str_id(row.get("team_season_id")) or refs.team_season_id_for(team_id, season_id),
            season_id=season_id,
            season_name=refs.season_name(season_id),
            number=jersey_number(row.get("jersey_number", row.get("number"))),
            year=str(row.get("year") or ""),
            hometown=str(row.get("hometown") or ""),
            is_captain=captain_flag(row.get("is_captain")),
            goals=goals,
            assists=assists,
            points=goals + assists,
            games_played=as_float(row.get("games_played")) or 0,
            penalty_minutes=as_int(row.get("penalty_minutes")),
            goals_against=as_int(row.get("goals_against")),
            goals_against_average=as_float(row.get("goals_against_average")),
            saves=as_int(row.get("saves")),
            shots=as_int(row.get("shots")),
            save_percentage=as_float(row.get("save_percentage")),
            shutouts=as_int(row.get("shutouts")),
            minutes=as_float(row.get("minutes")) or 0,
        )

    def players(self) -> list[PlayerSeason]:
        return [self.player_season(row) for row in self.refs.source.player_seasons]

    def staff(self) -> list[Staff]:
        refs = self.refs
        out: list[Staff] = []
        for row in refs.source.staff:
            staff_id = str_id(row.get("id") or row.get("staff_id")) or ""
            assignment_rows = list(refs.staff_assignments.get(staff_id, []))
            if not assignment_rows and row.get("team_id") is not None:
                assignment_rows = [row]
            first = str(row.get("first_name") or "").strip()
            last = str(row.get("last_name") or "").strip()
            out.append(
                Staff(
                    staff_id=staff_id,
                    first_name=first,
                    last_name=last,
                    name=f"{first} {last}".strip(),
                    role=row.get("role"),
                    teams=[
                        StaffAssignment(
                            team_id=str_id(assignment.get("team_id")),
                            team_name=refs.team_name(assignment.get("team_id")),
                            team_gender=refs.team_gender(assignment.get("team_id")),
                        )
                        for assignment in assignment_rows
                    ],
                )
            )
        return out

    def project(self) -> ProjectedDataset:
        seasons = self.seasons()
        teams = self.teams()
        games = self.games()
        players = self.players()
        return ProjectedDataset(
            seasons=seasons,
            leagues=self.leagues(),
            divisions=self.divisions(),
            venues=self.venues(),
            teams=teams,
            games=games,
            players=players,
            staff=self.staff(),
            season_bundles=build_season_bundles(seasons, teams, games, players),
        )


def build_season_bundles(
    seasons: list[Season],
    teams: list[TeamSeason],
    games: list[Game],
    players: list[PlayerSeason],
) -> dict[str, SeasonBundle]:
    bundles: dict[str, SeasonBundle] = {}
    for season in seasons:
        bundles[season.id] = SeasonBundle(
            id=season.id,
            name=season.name,
            display_name=season.display_name,
            teams=[t for t in teams if t.season_id == season.id],
            games=[g for g in games if g.season_id == season.id],
            players=[p for p in players if p.season_id == season.id],
        )
    return bundles
