"""Id-keyed lookup tables over parsed source rows.

Historical source data has gaps, so every lookup here degrades to a fallback
value instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from .config import GENDER_CODES, INDEPENDENT_LEAGUE, SEASON_SUFFIX, UNKNOWN_NAME
from .models import str_id

Row = dict[str, Any]


@dataclass(slots=True)
class SourceRows:
    seasons: list[Row] = field(default_factory=list)
    leagues: list[Row] = field(default_factory=list)
    divisions: list[Row] = field(default_factory=list)
    venues: list[Row] = field(default_factory=list)
    schools: list[Row] = field(default_factory=list)
    teams: list[Row] = field(default_factory=list)
    team_seasons: list[Row] = field(default_factory=list)
    games: list[Row] = field(default_factory=list)
    players: list[Row] = field(default_factory=list)
    player_seasons: list[Row] = field(default_factory=list)
    staff: list[Row] = field(default_factory=list)
    staff_teams: list[Row] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {f.name: len(getattr(self, f.name)) for f in fields(self)}


def index_by_id(rows: list[Row], key: str = "id") -> dict[str, Row]:
    out: dict[str, Row] = {}
    for row in rows:
        row_id = str_id(row.get(key))
        if row_id is not None and row_id not in out:
            out[row_id] = row
    return out


def season_label(name: Any) -> str:
    text = str(name or "").strip()
    if not text:
        return UNKNOWN_NAME
    return text if SEASON_SUFFIX in text else f"{text} {SEASON_SUFFIX}"


def normalize_gender(value: Any) -> str | None:
    if value is None:
        return None
    return GENDER_CODES.get(str(value).strip().upper()[:1])


@dataclass(slots=True)
class ReferenceTables:
    seasons: dict[str, Row]
    leagues: dict[str, Row]
    divisions: dict[str, Row]
    venues: dict[str, Row]
    schools: dict[str, Row]
    teams: dict[str, Row]
    team_seasons: dict[str, Row]
    players: dict[str, Row]
    staff: dict[str, Row]
    team_season_by_team: dict[tuple[str, str], Row]
    staff_assignments: dict[str, list[Row]]
    source: SourceRows

    def season(self, season_id: Any) -> Row | None:
        return self.seasons.get(str_id(season_id) or "")

    def season_name(self, season_id: Any) -> str:
        season = self.season(season_id)
        return season_label(season.get("name")) if season else UNKNOWN_NAME

    def team(self, team_id: Any) -> Row | None:
        return self.teams.get(str_id(team_id) or "")

    def team_name(self, team_id: Any) -> str:
        team = self.team(team_id)
        return str(team.get("name") or UNKNOWN_NAME) if team else UNKNOWN_NAME

    def team_gender(self, team_id: Any) -> str | None:
        team = self.team(team_id)
        return normalize_gender(team.get("gender")) if team else None

    def league(self, league_id: Any) -> Row | None:
        return self.leagues.get(str_id(league_id) or "")

    def league_name(self, league_id: Any) -> str:
        league = self.league(league_id)
        return str(league.get("name") or INDEPENDENT_LEAGUE) if league else INDEPENDENT_LEAGUE

    def division_name(self, division_id: Any) -> str | None:
        division = self.divisions.get(str_id(division_id) or "")
        return division.get("name") if division else None

    def venue_name(self, venue_id: Any) -> str | None:
        venue = self.venues.get(str_id(venue_id) or "")
        return venue.get("name") if venue else None

    def team_season(self, team_season_id: Any) -> Row | None:
        return self.team_seasons.get(str_id(team_season_id) or "")

    def team_season_id_for(self, team_id: Any, season_id: Any) -> str | None:
        key = (str_id(team_id) or "", str_id(season_id) or "")
        row = self.team_season_by_team.get(key)
        return str_id(row.get("id")) if row else None

    def player(self, player_id: Any) -> Row | None:
        return self.players.get(str_id(player_id) or "")


def build_reference_tables(source: SourceRows) -> ReferenceTables:
    team_season_by_team: dict[tuple[str, str], Row] = {}
    for row in source.team_seasons:
        key = (str_id(row.get("team_id")) or "", str_id(row.get("season_id")) or "")
        team_season_by_team.setdefault(key, row)

    staff_assignments: dict[str, list[Row]] = {}
    for row in source.staff_teams:
        staff_id = str_id(row.get("staff_id"))
        if staff_id is not None:
            staff_assignments.setdefault(staff_id, []).append(row)

    return ReferenceTables(
        seasons=index_by_id(source.seasons),
        leagues=index_by_id(source.leagues),
        divisions=index_by_id(source.divisions),
        venues=index_by_id(source.venues),
        schools=index_by_id(source.schools),
        teams=index_by_id(source.teams),
        team_seasons=index_by_id(source.team_seasons),
        players=index_by_id(source.players),
        staff=index_by_id(source.staff),
        team_season_by_team=team_season_by_team,
        staff_assignments=staff_assignments,
        source=source,
    )
