"""Application state for the archive browser.

``AppState`` is an immutable snapshot; every transition is a plain function
``(state, ...) -> state``. ``HockeyArchive`` owns the current state, loads the
dataset and builds the team and player detail views.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from threading import Lock, Timer
from typing import Any, Callable

from .config import GOALIE_POSITION, Settings, get_settings
from .filters import (
    FilteredView,
    FilterOptions,
    FilterState,
    apply_filters,
    cascade,
    default_season_id,
    select,
)
from .loader import DatasetLoadError, load_dataset
from .logging import get_logger
from .models import Dataset, Game, PlayerSeason, Record, TeamSeason
from .navigation import find_team_by_path, team_path, team_url
from .pagination import Cursor, Page, default_cursors, get_page, reset_all, reset_page, set_page
from .sorting import SortSpec, sort_records, toggle_sort
from .standings import format_win_pct, split_players

logger = get_logger(__name__)

TABS = ("teams", "games", "players", "standings")
TEAMS_VIEWS = ("table", "cards")


@dataclass(frozen=True, slots=True)
class AppState:
    dataset: Dataset | None = None
    filters: FilterState = field(default_factory=FilterState)
    options: FilterOptions = field(default_factory=FilterOptions)
    view: FilteredView = field(default_factory=FilteredView)
    skaters: list[PlayerSeason] = field(default_factory=list)
    goalies: list[PlayerSeason] = field(default_factory=list)
    pagination: dict[str, Cursor] = field(default_factory=default_cursors)
    sort: dict[str, SortSpec] = field(default_factory=dict)
    current_tab: str = "teams"
    teams_view: str = "table"
    error: str | None = None

    @property
    def loaded(self) -> bool:
        return self.dataset is not None and self.error is None


def view_items(state: AppState, view: str) -> list[Any]:
    if view in ("teams", "cards"):
        return state.view.teams
    if view == "games":
        return state.view.games
    if view == "skaters":
        return state.skaters
    if view == "goalies":
        return state.goalies
    raise ValueError(f"Unknown view: {view}")


def refresh(state: AppState) -> AppState:
    """Run the filter pass; every pagination cursor goes back to page 1."""
    if state.dataset is None:
        return state
    view = apply_filters(state.dataset, state.filters)
    skaters, goalies = split_players(view.players)
    return replace(
        state,
        view=view,
        skaters=skaters,
        goalies=goalies,
        pagination=reset_all(state.pagination),
        sort={},
    )


def initial_state(dataset: Dataset, season_id: str | None = None) -> AppState:
    season = default_season_id(dataset.seasons) if season_id is None else season_id
    filters, options = cascade(dataset, FilterState(season_id=season), "season")
    return refresh(AppState(dataset=dataset, filters=filters, options=options))


def load_failed(state: AppState, message: str) -> AppState:
    return AppState(pagination=state.pagination, error=f"Failed to load data: {message}")


def select_filter(state: AppState, name: str, value: str) -> AppState:
    if state.dataset is None:
        return state
    if name == "search":
        return set_search(state, value)
    filters, options = select(state.dataset, state.filters, state.options, name, value)
    return refresh(replace(state, filters=filters, options=options))


def set_search(state: AppState, term: str) -> AppState:
    return refresh(replace(state, filters=replace(state.filters, search=term or "")))


def sort_table(state: AppState, table: str, key: str) -> AppState:
    sort_state, spec = toggle_sort(state.sort, table, key)
    ordered = sort_records(view_items(state, table), table, spec.key, spec.direction)
    if table == "teams":
        updated = replace(state, view=replace(state.view, teams=ordered))
    elif table == "games":
        updated = replace(state, view=replace(state.view, games=ordered))
    elif table == "skaters":
        updated = replace(state, skaters=ordered)
    else:
        updated = replace(state, goalies=ordered)
    return replace(updated, sort=sort_state, pagination=reset_page(state.pagination, table))


def change_page(state: AppState, view: str, page: int) -> AppState:
    return replace(state, pagination=set_page(state.pagination, view, page))


def switch_tab(state: AppState, tab: str) -> AppState:
    if tab not in TABS:
        raise ValueError(f"Unknown tab: {tab}")
    return replace(state, current_tab=tab)


def switch_teams_view(state: AppState, teams_view: str) -> AppState:
    if teams_view not in TEAMS_VIEWS:
        raise ValueError(f"Unknown teams view: {teams_view}")
    return replace(state, teams_view=teams_view)


def current_page(state: AppState, view: str) -> Page[Any]:
    return get_page(state.pagination, view, view_items(state, view))


@dataclass(slots=True)
class RecordCard:
    title: str
    value: str
    detail: str


@dataclass(slots=True)
class ScheduleRow:
    game_id: str
    date: str | None
    home_away: str
    opponent: str
    result: str
    score: str
    venue: str | None


@dataclass(slots=True)
class SeasonChoice:
    team_season_id: str
    label: str
    selected: bool = False


@dataclass(slots=True)
class TeamPage:
    team: TeamSeason
    path: str
    cards: list[RecordCard]
    skaters: list[PlayerSeason]
    goalies: list[PlayerSeason]
    totals: dict[str, int]
    schedule: list[ScheduleRow]
    seasons: list[SeasonChoice]


@dataclass(slots=True)
class CareerTotals:
    games_played: float = 0
    goals: int = 0
    assists: int = 0
    points: int = 0
    penalty_minutes: int = 0
    goals_against: int = 0
    saves: int = 0
    shots: int = 0
    shutouts: int = 0
    goals_against_average: float | None = None
    save_percentage: float | None = None


@dataclass(slots=True)
class PlayerDetail:
    player: PlayerSeason
    is_goalie: bool
    history: list[PlayerSeason]
    totals: CareerTotals


def _per_game(total: int, games: int) -> str:
    return f"{total / games:.1f}" if games > 0 else "0.0"


def record_cards(team: TeamSeason) -> list[RecordCard]:
    overall: Record = team.overall
    league: Record = team.league
    games = overall.games_played
    pct = format_win_pct(overall)
    return [
        RecordCard("Overall Record", overall.summary, f"{'0.0%' if pct == '-' else pct} Win Rate"),
        RecordCard("League Record", league.summary, f"{league.points} Points"),
        RecordCard("Goals For", str(overall.goals_for), f"{_per_game(overall.goals_for, games)} per game"),
        RecordCard("Goals Against", str(overall.goals_against), f"{_per_game(overall.goals_against, games)} per game"),
        RecordCard("Point Differential", str(overall.goal_diff), "GF - GA"),
        RecordCard("Total Points", str(overall.points), "2pts Win, 1pt Tie"),
    ]


def team_roster(dataset: Dataset, team: TeamSeason) -> list[PlayerSeason]:
    return [p for p in dataset.players if p.team_id == team.team_id and p.season_id == team.season_id]


def roster_totals(skaters: list[PlayerSeason]) -> dict[str, int]:
    return {
        "goals": sum(p.goals for p in skaters),
        "assists": sum(p.assists for p in skaters),
        "points": sum(p.points for p in skaters),
        "penalty_minutes": sum(p.penalty_minutes for p in skaters),
    }


def team_schedule(dataset: Dataset, team: TeamSeason) -> list[ScheduleRow]:
    games: list[Game] = [
        g for g in dataset.games if team.id in (g.home_team_season_id, g.away_team_season_id)
    ]
    games.sort(key=lambda g: g.timestamp or 0)
    rows: list[ScheduleRow] = []
    for game in games:
        is_home = game.home_team_season_id == team.id
        result, score = game.result_for(team.id)
        rows.append(
            ScheduleRow(
                game_id=game.id,
                date=game.date,
                home_away="vs" if is_home else "@",
                opponent=game.away_team if is_home else game.home_team,
                result=result,
                score=score,
                venue=game.venue,
            )
        )
    return rows


def _season_number(season_id: str | None) -> int:
    try:
        return int(season_id or 0)
    except ValueError:
        return 0


def season_choices(dataset: Dataset, team: TeamSeason) -> list[SeasonChoice]:
    seasons = [t for t in dataset.teams if t.team_id == team.team_id]
    seasons.sort(key=lambda t: _season_number(t.season_id), reverse=True)
    return [
        SeasonChoice(
            team_season_id=t.id,
            label=t.season_name or f"Season {t.season_id}",
            selected=t.season_id == team.season_id,
        )
        for t in seasons
    ]


def build_team_page(dataset: Dataset, team: TeamSeason) -> TeamPage:
    skaters, goalies = split_players(team_roster(dataset, team))
    return TeamPage(
        team=team,
        path=team_path(team),
        cards=record_cards(team),
        skaters=skaters,
        goalies=goalies,
        totals=roster_totals(skaters),
        schedule=team_schedule(dataset, team),
        seasons=season_choices(dataset, team),
    )


def career_totals(history: list[PlayerSeason], is_goalie: bool) -> CareerTotals:
    totals = CareerTotals()
    for season in history:
        totals.games_played += season.games_played or 0
        totals.goals += season.goals
        totals.assists += season.assists
        totals.points += season.points
        totals.penalty_minutes += season.penalty_minutes
        totals.goals_against += season.goals_against
        totals.saves += season.saves
        totals.shots += season.shots
        totals.shutouts += season.shutouts
    if is_goalie:
        if totals.games_played > 0:
            totals.goals_against_average = round(totals.goals_against / totals.games_played, 2)
        if totals.shots > 0:
            totals.save_percentage = round(totals.saves / totals.shots, 3)
    return totals


def build_player_detail(dataset: Dataset, player: PlayerSeason) -> PlayerDetail:
    # Players are linked across seasons by display name only.
    history = [p for p in dataset.players if p.name == player.name]
    history.sort(key=lambda p: _season_number(p.season_id), reverse=True)
    is_goalie = any(p.position == GOALIE_POSITION for p in history)
    return PlayerDetail(player=player, is_goalie=is_goalie, history=history, totals=career_totals(history, is_goalie))


class Debouncer:
    """Trailing-edge debounce: only the last call within ``delay`` seconds runs."""

    def __init__(self, delay: float, callback: Callable[[str], None]) -> None:
        self.delay = delay
        self.callback = callback
        self._timer: Timer | None = None
        self._pending: str | None = None
        self._lock = Lock()

    def __call__(self, value: str) -> None:
        if self.delay <= 0:
            self.callback(value)
            return
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = value
            self._timer = Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            value, self._pending, self._timer = self._pending, None, None
        if value is not None:
            self.callback(value)

    def flush(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        self._fire()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None


class HockeyArchive:
    def __init__(
        self,
        settings: Settings | None = None,
        loader: Callable[[Settings], Dataset] = load_dataset,
    ) -> None:
        self.settings = settings or get_settings()
        self._loader = loader
        self._lock = Lock()
        self.state = AppState()
        self.search = Debouncer(self.settings.search_debounce_ms / 1000, self._apply_search)

    def load(self) -> AppState:
        try:
            dataset = self._loader(self.settings)
        except DatasetLoadError as exc:
            logger.error("Error loading data: {}", exc)
            with self._lock:
                self.state = load_failed(self.state, str(exc))
                return self.state
        return self.use_dataset(dataset)

    def use_dataset(self, dataset: Dataset) -> AppState:
        with self._lock:
            self.state = initial_state(dataset)
            return self.state

    @property
    def dataset(self) -> Dataset | None:
        return self.state.dataset

    def select_filter(self, name: str, value: str) -> AppState:
        with self._lock:
            self.state = select_filter(self.state, name, value)
            return self.state

    def _apply_search(self, term: str) -> None:
        with self._lock:
            self.state = set_search(self.state, term)

    def sort(self, table: str, key: str) -> AppState:
        with self._lock:
            self.state = sort_table(self.state, table, key)
            return self.state

    def change_page(self, view: str, page: int) -> AppState:
        with self._lock:
            self.state = change_page(self.state, view, page)
            return self.state

    def page(self, view: str) -> Page[Any]:
        return current_page(self.state, view)

    def team_page(self, team_season_id: str) -> TeamPage | None:
        dataset = self.state.dataset
        team = dataset.team_season(team_season_id) if dataset else None
        if dataset is None or team is None:
            logger.warning("Team season not found: {}", team_season_id)
            return None
        return build_team_page(dataset, team)

    def team_page_by_path(self, season: str, team: str) -> TeamPage | None:
        dataset = self.state.dataset
        found = find_team_by_path(dataset.teams, season, team) if dataset else None
        if dataset is None or found is None:
            logger.warning("No team matches {}/{}", season, team)
            return None
        return build_team_page(dataset, found)

    def navigate_to_team(self, team_season_id: str) -> str | None:
        dataset = self.state.dataset
        team = dataset.team_season(team_season_id) if dataset else None
        if team is None:
            logger.warning("Cannot navigate to unknown team season {}", team_season_id)
            return None
        return team_url(team)

    def team_for_game_side(self, team_season_id: str | None, team_name: str | None = None) -> TeamSeason | None:
        dataset = self.state.dataset
        if dataset is None:
            return None
        team = dataset.team_season(team_season_id)
        if team is None and team_name:
            team = next((t for t in dataset.teams if t.team_name == team_name), None)
        if team is None:
            logger.warning("Team not found for game: {} ({})", team_season_id, team_name)
        return team

    def team_for_player_season(self, player_season_id: str) -> TeamSeason | None:
        dataset = self.state.dataset
        player = dataset.player_season(player_season_id) if dataset else None
        if dataset is None or player is None:
            logger.warning("Player season not found: {}", player_season_id)
            return None
        team = next(
            (t for t in dataset.teams if t.team_id == player.team_id and t.season_id == player.season_id),
            None,
        )
        if team is None:
            logger.warning("Team not found for {} in season {}", player.team_name, player.season_id)
        return team

    def player_detail(self, player_season_id: str) -> PlayerDetail | None:
        dataset = self.state.dataset
        player = dataset.player_season(player_season_id) if dataset else None
        if dataset is None or player is None:
            logger.warning("Player season not found: {}", player_season_id)
            return None
        return build_player_detail(dataset, player)
