"""Cascading filter state and the conjunctive filter pass.

Selectors use ``""`` for "all". Season and gender narrow every downstream
dropdown; league narrows division and team; division narrows team.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Iterable

from .config import DEFAULT_SEASON_ID
from .models import Dataset, Game, PlayerSeason, Season, TeamSeason

FILTER_FIELDS = ("season", "gender", "league", "division", "team", "search")

_DIVISION_NUMBER_RE = re.compile(r"\d+")


@dataclass(frozen=True, slots=True)
class FilterState:
    season_id: str = ""
    gender: str = ""
    league_id: str = ""
    division_id: str = ""
    team_id: str = ""
    search: str = ""

    @property
    def search_term(self) -> str:
        return self.search.strip().lower()


@dataclass(frozen=True, slots=True)
class FilterOptions:
    leagues: tuple[tuple[str, str], ...] = ()
    divisions: tuple[tuple[str, str], ...] = ()
    teams: tuple[tuple[str, str], ...] = ()


@dataclass(slots=True)
class FilteredView:
    teams: list[TeamSeason] = field(default_factory=list)
    games: list[Game] = field(default_factory=list)
    players: list[PlayerSeason] = field(default_factory=list)


def season_sort_key(season: Season) -> tuple[int, int, str]:
    if season.id.isdigit():
        return (1, int(season.id), season.id)
    return (0, 0, season.id)


def ordered_seasons(seasons: Iterable[Season]) -> list[Season]:
    """Most recent first."""
    return sorted(seasons, key=season_sort_key, reverse=True)


def default_season_id(seasons: list[Season], preferred: str = DEFAULT_SEASON_ID) -> str:
    if any(s.id == preferred for s in seasons):
        return preferred
    ordered = ordered_seasons(seasons)
    return ordered[0].id if ordered else ""


def dropdown_candidates(teams: Iterable[TeamSeason], state: FilterState) -> list[TeamSeason]:
    out = list(teams)
    if state.season_id:
        out = [t for t in out if t.season_id == state.season_id]
    if state.gender:
        out = [t for t in out if t.gender == state.gender]
    return out


def _division_sort_key(option: tuple[str, str]) -> tuple[int, str]:
    match = _DIVISION_NUMBER_RE.search(option[1])
    number = int(match.group()) if match else 0
    return (number or 99, option[1].casefold())


def league_options(teams: Iterable[TeamSeason], state: FilterState) -> tuple[tuple[str, str], ...]:
    found: dict[str, str] = {}
    for team in dropdown_candidates(teams, state):
        if team.league_id and team.league_name:
            found[team.league_id] = team.league_name
    return tuple(sorted(found.items(), key=lambda item: item[1].casefold()))


def division_options(teams: Iterable[TeamSeason], state: FilterState) -> tuple[tuple[str, str], ...]:
    candidates = dropdown_candidates(teams, state)
    if state.league_id:
        candidates = [t for t in candidates if t.league_id == state.league_id]
    found: dict[str, str] = {}
    for team in candidates:
        if team.division_id and team.division_name:
            found[team.division_id] = team.division_name
    return tuple(sorted(found.items(), key=_division_sort_key))


def team_options(teams: Iterable[TeamSeason], state: FilterState) -> tuple[tuple[str, str], ...]:
    candidates = dropdown_candidates(teams, state)
    if state.league_id:
        candidates = [t for t in candidates if t.league_id == state.league_id]
    if state.division_id:
        candidates = [t for t in candidates if t.division_id == state.division_id]
    found: dict[str, str] = {}
    for team in candidates:
        if team.team_id:
            found[team.team_id] = team.team_name or ""
    return tuple(sorted(found.items(), key=lambda item: item[1].casefold()))


def _keep(value: str, options: tuple[tuple[str, str], ...]) -> str:
    return value if any(option_id == value for option_id, _ in options) else ""


def cascade(
    dataset: Dataset,
    state: FilterState,
    changed: str,
    options: FilterOptions | None = None,
) -> tuple[FilterState, FilterOptions]:
    """Recompute the dropdowns downstream of ``changed``.

    Options upstream of the change are carried over from ``options``; a
    selection that is no longer offered falls back to ``""``.
    """
    if changed not in FILTER_FIELDS:
        raise ValueError(f"Unknown filter: {changed}")
    current = options or FilterOptions()
    teams = dataset.teams

    leagues = current.leagues
    divisions = current.divisions
    team_opts = current.teams

    # Every selection is checked against its options, including the one just changed.
    if changed in ("season", "gender") or options is None:
        leagues = league_options(teams, state)
    state = replace(state, league_id=_keep(state.league_id, leagues))
    if changed in ("season", "gender", "league") or options is None:
        divisions = division_options(teams, state)
    state = replace(state, division_id=_keep(state.division_id, divisions))
    if changed in ("season", "gender", "league", "division") or options is None:
        team_opts = team_options(teams, state)
    state = replace(state, team_id=_keep(state.team_id, team_opts))

    return state, FilterOptions(leagues=leagues, divisions=divisions, teams=team_opts)


def select(
    dataset: Dataset,
    state: FilterState,
    options: FilterOptions | None,
    changed: str,
    value: str,
) -> tuple[FilterState, FilterOptions]:
    attr = {
        "season": "season_id",
        "gender": "gender",
        "league": "league_id",
        "division": "division_id",
        "team": "team_id",
        "search": "search",
    }.get(changed)
    if attr is None:
        raise ValueError(f"Unknown filter: {changed}")
    return cascade(dataset, replace(state, **{attr: value or ""}), changed, options)


def filter_teams(teams: Iterable[TeamSeason], state: FilterState) -> list[TeamSeason]:
    term = state.search_term
    out: list[TeamSeason] = []
    for team in teams:
        if state.season_id and team.season_id != state.season_id:
            continue
        if state.gender and team.gender != state.gender:
            continue
        if state.league_id and team.league_id != state.league_id:
            continue
        if state.division_id and team.division_id != state.division_id:
            continue
        if state.team_id and team.team_id != state.team_id:
            continue
        if term and term not in f"{team.team_name} {team.league_name}".lower():
            continue
        out.append(team)
    return out


def filter_games(dataset: Dataset, state: FilterState) -> list[Game]:
    term = state.search_term
    selected_ids: set[str] = set()
    if state.team_id:
        selected_ids = {
            t.id
            for t in dataset.teams
            if t.team_id == state.team_id and (not state.season_id or t.season_id == state.season_id)
        }
    gender_ids: set[str] | None = None
    if state.gender:
        gender_ids = {t.id for t in dataset.teams if t.gender == state.gender}

    out: list[Game] = []
    for game in dataset.games:
        if state.season_id and game.season_id != state.season_id:
            continue
        # Either side of the game qualifies it for a gender.
        if gender_ids is not None and (
            game.home_team_season_id not in gender_ids and game.away_team_season_id not in gender_ids
        ):
            continue
        if state.team_id and (
            game.home_team_season_id not in selected_ids and game.away_team_season_id not in selected_ids
        ):
            continue
        if term and term not in f"{game.home_team} {game.away_team} {game.venue or ''}".lower():
            continue
        out.append(game)
    return out


def filter_players(dataset: Dataset, state: FilterState) -> list[PlayerSeason]:
    term = state.search_term
    gender_team_ids: set[str | None] | None = None
    if state.gender:
        gender_team_ids = {t.team_id for t in dataset.teams if t.gender == state.gender}

    out: list[PlayerSeason] = []
    for player in dataset.players:
        if state.season_id and player.season_id != state.season_id:
            continue
        if gender_team_ids is not None and player.team_id not in gender_team_ids:
            continue
        if state.team_id and player.team_id != state.team_id:
            continue
        if term and term not in f"{player.name} {player.team_name}".lower():
            continue
        out.append(player)
    return out


def apply_filters(dataset: Dataset, state: FilterState) -> FilteredView:
    return FilteredView(
        teams=filter_teams(dataset.teams, state),
        games=filter_games(dataset, state),
        players=filter_players(dataset, state),
    )
