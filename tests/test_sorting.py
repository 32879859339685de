from types import SimpleNamespace

import pytest

from hshockey.sorting import SortSpec, compare_values, sort_records, toggle_sort


def test_toggle_cycles_ascending_descending() -> None:
    state, spec = toggle_sort({}, "teams", "wins")
    assert spec == SortSpec("wins", "asc")
    state, spec = toggle_sort(state, "teams", "wins")
    assert spec.direction == "desc"
    state, spec = toggle_sort(state, "teams", "wins")
    assert spec.direction == "asc"


def test_new_column_starts_ascending_and_leaves_other_tables_alone() -> None:
    state, _ = toggle_sort({}, "teams", "wins")
    state, _ = toggle_sort(state, "teams", "wins")
    state, _ = toggle_sort(state, "games", "date")
    state, spec = toggle_sort(state, "teams", "losses")
    assert spec == SortSpec("losses", "asc")
    assert state["teams"] == SortSpec("losses", "asc")
    assert state["games"] == SortSpec("date", "asc")


def test_team_record_fields_read_the_overall_record(dataset) -> None:
    ordered = sort_records(dataset.teams, "teams", "wins", "desc")
    assert [t.overall.wins for t in ordered] == [12, 10, 8, 5, 3, 0]
    ordered = sort_records(dataset.teams, "teams", "goals_against", "asc")
    assert [t.overall.goals_against for t in ordered] == [0, 12, 25, 30, 31, 44]


def test_win_pct_is_derived_and_zero_game_teams_sort_last(dataset) -> None:
    ascending = sort_records(dataset.teams, "teams", "win_pct", "asc")
    descending = sort_records(dataset.teams, "teams", "win_pct", "desc")
    assert ascending[-1].team_name == "Wellesley"
    assert descending[-1].team_name == "Wellesley"
    assert descending[0].team_name == "Needham"


def test_ascending_then_descending_reverses_unique_keys(dataset) -> None:
    ascending = sort_records(dataset.players, "skaters", "id", "asc")
    descending = sort_records(dataset.players, "skaters", "id", "desc")
    assert [p.id for p in descending] == [p.id for p in reversed(ascending)]


def test_numeric_strings_compare_numerically() -> None:
    rows = [SimpleNamespace(number="10"), SimpleNamespace(number="9"), SimpleNamespace(number=" 2 ")]
    ordered = sort_records(rows, "skaters", "number", "asc")
    assert [r.number for r in ordered] == [" 2 ", "9", "10"]


def test_text_compares_case_insensitively_and_missing_goes_last() -> None:
    rows = [
        SimpleNamespace(name="beverly"),
        SimpleNamespace(name=None),
        SimpleNamespace(name="Arlington"),
        SimpleNamespace(name=""),
        SimpleNamespace(name="Cambridge"),
    ]
    assert [r.name for r in sort_records(rows, "games", "name", "asc")] == ["Arlington", "beverly", "Cambridge", None, ""]
    assert [r.name for r in sort_records(rows, "games", "name", "desc")] == ["Cambridge", "beverly", "Arlington", None, ""]


def test_compare_values() -> None:
    assert compare_values(2, "10") == -1
    assert compare_values("abc", "ABC") == 0
    assert compare_values(1.5, 1.5) == 0


def test_rejects_unknown_table_or_direction(dataset) -> None:
    with pytest.raises(ValueError):
        sort_records(dataset.teams, "teams", "wins", "sideways")
    with pytest.raises(ValueError):
        sort_records(dataset.teams, "coaches", "wins")
    with pytest.raises(ValueError):
        toggle_sort({}, "coaches", "wins")
