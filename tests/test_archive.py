import pytest

from hshockey.archive import (
    Debouncer,
    HockeyArchive,
    change_page,
    current_page,
    initial_state,
    load_failed,
    select_filter,
    set_search,
    sort_table,
    switch_tab,
    switch_teams_view,
)
from hshockey.config import Settings
from hshockey.loader import DatasetLoadError


def _archive(dataset=None, error: str | None = None) -> HockeyArchive:
    def loader(settings):
        if error is not None:
            raise DatasetLoadError(error)
        return dataset

    return HockeyArchive(Settings(search_debounce_ms=0), loader=loader)


def test_initial_state_opens_on_default_season(dataset) -> None:
    state = initial_state(dataset)
    assert state.filters.season_id == "11"
    assert len(state.view.teams) == 4
    assert [p.id for p in state.goalies] == ["502", "505"]
    assert state.loaded


def test_filter_change_resets_every_page(dataset) -> None:
    state = initial_state(dataset)
    state = change_page(state, "games", 2)
    state = change_page(state, "skaters", 3)
    state = select_filter(state, "gender", "M")
    assert all(cursor.page == 1 for cursor in state.pagination.values())
    assert {t.gender for t in state.view.teams} == {"M"}


def test_sort_resets_only_that_table(dataset) -> None:
    state = initial_state(dataset)
    state = change_page(state, "teams", 2)
    state = change_page(state, "games", 2)
    state = sort_table(state, "teams", "wins")
    assert state.pagination["teams"].page == 1
    assert state.pagination["games"].page == 2
    assert [t.overall.wins for t in state.view.teams] == [0, 5, 8, 10]

    state = sort_table(state, "teams", "wins")
    assert [t.overall.wins for t in state.view.teams] == [10, 8, 5, 0]
    assert state.sort["teams"].direction == "desc"


def test_sorting_does_not_change_membership(dataset) -> None:
    state = initial_state(dataset)
    ordered = sort_table(state, "skaters", "name")
    assert sorted(p.id for p in ordered.skaters) == sorted(p.id for p in state.skaters)


def test_search_reducer_filters_all_views(dataset) -> None:
    state = set_search(initial_state(dataset), "wellesley")
    assert [t.team_name for t in state.view.teams] == ["Wellesley"]
    assert sorted(g.id for g in state.view.games) == ["2", "5"]
    assert [p.name for p in state.skaters] == ["Ann Lee"]


def test_current_page_uses_view_cursor(dataset) -> None:
    state = initial_state(dataset, season_id="")
    page = current_page(state, "cards")
    assert page.per_page == 15
    assert len(page.items) == 6


def test_load_failure_keeps_error_and_no_views() -> None:
    archive = _archive(error="boom")
    state = archive.load()
    assert state.error == "Failed to load data: boom"
    assert state.dataset is None
    assert state.view.teams == []
    assert not state.loaded
    assert load_failed(state, "x").error == "Failed to load data: x"


def test_unknown_tab_or_teams_view_is_rejected(dataset) -> None:
    with pytest.raises(ValueError):
        switch_tab(initial_state(dataset), "coaches")
    state = switch_teams_view(initial_state(dataset), "cards")
    assert state.teams_view == "cards"
    with pytest.raises(ValueError):
        switch_teams_view(state, "grid")


def test_team_page(dataset) -> None:
    archive = _archive(dataset)
    archive.load()
    page = archive.team_page_by_path("2018-2019", "st-john-s-prep")

    assert page.path == "2018-2019/st-john-s-prep"
    assert page.cards[0].value == "10-3-2"
    assert page.cards[0].detail == "73.3% Win Rate"
    assert page.cards[2].detail == "3.3 per game"
    assert page.cards[4].value == "20"
    assert [p.name for p in page.skaters] == ["Jack Smith", "Mike Jones"]
    assert [p.name for p in page.goalies] == ["Sam Keeper"]
    assert page.totals == {"goals": 12, "assists": 13, "points": 25, "penalty_minutes": 14}

    assert [row.game_id for row in page.schedule] == ["1", "5", "3"]
    assert [(row.home_away, row.result, row.score) for row in page.schedule] == [
        ("vs", "W", "4-2"),
        ("vs", "L", "2-3"),
        ("@", "-", "-"),
    ]
    assert [(c.team_season_id, c.selected) for c in page.seasons] == [("100", True), ("90", False)]


def test_missing_team_or_player_returns_none(dataset) -> None:
    archive = _archive(dataset)
    archive.load()
    assert archive.team_page("nope") is None
    assert archive.team_page_by_path("1999-2000", "st-john-s-prep") is None
    assert archive.player_detail("nope") is None
    assert archive.navigate_to_team("nope") is None


def test_navigation_helpers(dataset) -> None:
    archive = _archive(dataset)
    archive.load()
    assert archive.navigate_to_team("90") == "#/2017-2018/st-john-s-prep"
    assert archive.team_for_player_season("504").id == "90"
    assert archive.team_for_game_side("missing", "Xaverian").id == "101"
    assert archive.team_for_game_side(None) is None


def test_skater_history_and_totals(dataset) -> None:
    archive = _archive(dataset)
    archive.load()
    detail = archive.player_detail("500")
    assert not detail.is_goalie
    assert [p.id for p in detail.history] == ["500", "504"]
    assert detail.totals.goals == 16
    assert detail.totals.points == 25
    assert detail.totals.penalty_minutes == 6
    assert detail.totals.goals_against_average is None


def test_goalie_totals_use_ratio_of_sums(dataset) -> None:
    archive = _archive(dataset)
    archive.load()
    detail = archive.player_detail("400")
    assert detail.is_goalie
    assert [p.season_id for p in detail.history] == ["11", "10"]
    assert detail.totals.goals_against_average == pytest.approx(51 / 25, abs=0.005)
    assert detail.totals.save_percentage == pytest.approx(500 / 551, abs=0.0005)
    assert detail.totals.shutouts == 3


def test_controller_transitions(dataset) -> None:
    archive = _archive(dataset)
    archive.load()
    archive.change_page("games", 2)
    archive.select_filter("team", "1")
    assert archive.state.pagination["games"].page == 1
    assert sorted(g.id for g in archive.page("games").items) == ["1", "3", "5"]
    archive.search("keeper")
    assert [p.name for p in archive.state.goalies] == ["Sam Keeper"]
    archive.sort("goalies", "goals_against_average")
    assert archive.state.sort["goalies"].key == "goals_against_average"


def test_debouncer_runs_only_last_value() -> None:
    calls: list[str] = []
    debouncer = Debouncer(60.0, calls.append)
    debouncer("s")
    debouncer("st")
    debouncer("stj")
    assert calls == []
    debouncer.flush()
    assert calls == ["stj"]
    debouncer("x")
    debouncer.cancel()
    debouncer.flush()
    assert calls == ["stj"]
