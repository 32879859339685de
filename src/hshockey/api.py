from __future__ import annotations

from dataclasses import asdict
from threading import Lock
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .archive import (
    AppState,
    HockeyArchive,
    initial_state,
    select_filter,
    set_search,
    view_items,
)
from .config import Settings, get_settings
from .filters import ordered_seasons
from .models import Dataset
from .pagination import get_page, set_page, set_per_page
from .projector import build_season_bundles
from .sorting import DIRECTIONS, sort_records
from .standings import build_standings, format_win_pct, game_summary, player_summary, team_summary

GENDERS = {"", "M", "F"}


class FilterQuery(BaseModel):
    season: str | None = None
    gender: str = ""
    league: str = ""
    division: str = ""
    team: str = ""
    search: str = ""


class ListQuery(FilterQuery):
    page: int = 1
    per_page: int | None = None
    sort: str | None = None
    direction: str = "asc"


class ArchiveService:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.archive = HockeyArchive(self.settings)
        self._loaded = False
        self._lock = Lock()

    def use_dataset(self, dataset: Dataset) -> None:
        self.archive.use_dataset(dataset)
        self._loaded = True

    def dataset(self) -> Dataset:
        if not self._loaded:
            self.archive.load()
            self._loaded = True
        state = self.archive.state
        if state.error or state.dataset is None:
            raise HTTPException(status_code=503, detail=state.error or "Data not loaded")
        return state.dataset

    def query_state(self, query: FilterQuery) -> AppState:
        if query.gender not in GENDERS:
            raise HTTPException(status_code=400, detail=f"Unknown gender '{query.gender}'")
        state = initial_state(self.dataset(), season_id=query.season)
        for name, value in (
            ("gender", query.gender),
            ("league", query.league),
            ("division", query.division),
            ("team", query.team),
        ):
            if value:
                state = select_filter(state, name, value)
        if query.search:
            state = set_search(state, query.search)
        return state

    def filters(self, query: FilterQuery) -> dict[str, Any]:
        state = self.query_state(query)
        dataset = self.dataset()
        return {
            "selected": asdict(state.filters),
            "seasons": [{"id": s.id, "name": s.display_name or s.name} for s in ordered_seasons(dataset.seasons)],
            "genders": [{"id": "M", "name": "Boys"}, {"id": "F", "name": "Girls"}],
            "leagues": [{"id": i, "name": n} for i, n in state.options.leagues],
            "divisions": [{"id": i, "name": n} for i, n in state.options.divisions],
            "teams": [{"id": i, "name": n} for i, n in state.options.teams],
        }

    def listing(self, view: str, query: ListQuery) -> dict[str, Any]:
        if query.direction not in DIRECTIONS:
            raise HTTPException(status_code=400, detail=f"Unknown sort direction '{query.direction}'")
        if query.page < 1:
            raise HTTPException(status_code=400, detail="page must be at least 1")
        if query.per_page is not None and query.per_page < 1:
            raise HTTPException(status_code=400, detail="per_page must be at least 1")

        state = self.query_state(query)
        items = view_items(state, view)
        if query.sort:
            items = sort_records(items, view, query.sort, query.direction)
        cursors = state.pagination
        if query.per_page is not None:
            cursors = set_per_page(cursors, view, query.per_page)
        cursors = set_page(cursors, view, query.page)
        page = get_page(cursors, view, items)

        if view == "teams":
            summary = team_summary(state.view.teams)
        elif view == "games":
            summary = game_summary(state.view.games)
        else:
            summary = player_summary(state.skaters, state.goalies)
        return {
            "view": view,
            "filters": asdict(state.filters),
            "page": page.page,
            "per_page": page.per_page,
            "total_pages": page.total_pages,
            "total": page.total_items,
            "summary": summary,
            "items": [item.to_dict() for item in page.items],
        }

    def standings(self, query: FilterQuery) -> dict[str, Any]:
        state = self.query_state(query)
        return {
            "filters": asdict(state.filters),
            "groups": [
                {
                    "league_name": group.league_name,
                    "teams": [
                        {**team.to_dict(), "win_pct_display": format_win_pct(team.overall)}
                        for team in group.teams
                    ],
                }
                for group in build_standings(state.view.teams)
            ],
        }

    def season_bundle(self, season_id: str) -> dict[str, Any]:
        dataset = self.dataset()
        season = next((s for s in dataset.seasons if s.id == season_id), None)
        if season is None:
            raise HTTPException(status_code=404, detail="Season not found")
        bundles = build_season_bundles([season], dataset.teams, dataset.games, dataset.players)
        return bundles[season_id].to_dict()

    def team_page(self, season_slug: str, team_slug: str) -> dict[str, Any]:
        self.dataset()
        page = self.archive.team_page_by_path(season_slug, team_slug)
        if page is None:
            raise HTTPException(status_code=404, detail="Team not found")
        return asdict(page)

    def player(self, player_season_id: str) -> dict[str, Any]:
        self.dataset()
        detail = self.archive.player_detail(player_season_id)
        if detail is None:
            raise HTTPException(status_code=404, detail="Player not found")
        team = self.archive.team_for_player_season(player_season_id)
        payload = asdict(detail)
        payload["team_url"] = self.archive.navigate_to_team(team.id) if team else None
        return payload


service = ArchiveService()
app = FastAPI(title="Hockey Archive API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/data")
def data() -> dict[str, Any]:
    with service._lock:
        return service.dataset().to_dict()


@app.get("/api/seasons/{season_id}")
def season(season_id: str) -> dict[str, Any]:
    with service._lock:
        return service.season_bundle(season_id)


@app.get("/api/filters")
def filters(query: FilterQuery = Depends()) -> dict[str, Any]:
    with service._lock:
        return service.filters(query)


@app.get("/api/teams")
def teams(query: ListQuery = Depends()) -> dict[str, Any]:
    with service._lock:
        return service.listing("teams", query)


@app.get("/api/games")
def games(query: ListQuery = Depends()) -> dict[str, Any]:
    with service._lock:
        return service.listing("games", query)


@app.get("/api/skaters")
def skaters(query: ListQuery = Depends()) -> dict[str, Any]:
    with service._lock:
        return service.listing("skaters", query)


@app.get("/api/goalies")
def goalies(query: ListQuery = Depends()) -> dict[str, Any]:
    with service._lock:
        return service.listing("goalies", query)


@app.get("/api/standings")
def standings(query: FilterQuery = Depends()) -> dict[str, Any]:
    with service._lock:
        return service.standings(query)


@app.get("/api/team/{season_slug}/{team_slug}")
def team(season_slug: str, team_slug: str) -> dict[str, Any]:
    with service._lock:
        return service.team_page(season_slug, team_slug)


@app.get("/api/players/{player_season_id}")
def player(player_season_id: str) -> dict[str, Any]:
    with service._lock:
        return service.player(player_season_id)
