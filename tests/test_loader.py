import pytest
import requests

from hshockey.config import Settings
from hshockey.loader import DatasetLoadError, load_dataset, load_from_api, load_from_json
from hshockey.merge import run_merge


class _FakeResponse:
    def __init__(self, payload, status: int = 200) -> None:
        self._payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def test_loads_merged_output(sql_dir, tmp_path) -> None:
    output = tmp_path / "data"
    run_merge(sql_dir, output)
    dataset = load_from_json(output)
    assert len(dataset.teams) == 3
    assert len(dataset.games) == 3
    assert dataset.team_season("100").overall.points == 22
    assert dataset.staff == []


def test_missing_required_file_fails_whole_load(sql_dir, tmp_path) -> None:
    output = tmp_path / "data"
    run_merge(sql_dir, output)
    (output / "games.json").unlink()
    with pytest.raises(DatasetLoadError, match="games.json"):
        load_from_json(output)


def test_teams_json_is_accepted_without_team_seasons(sql_dir, tmp_path) -> None:
    output = tmp_path / "data"
    run_merge(sql_dir, output)
    (output / "team_seasons.json").unlink()
    assert len(load_from_json(output).teams) == 3


def test_malformed_json_is_a_load_error(tmp_path) -> None:
    for name in ("team_seasons.json", "games.json", "players.json", "leagues.json", "divisions.json", "seasons.json"):
        (tmp_path / name).write_text("[]", encoding="utf-8")
    (tmp_path / "players.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(DatasetLoadError, match="players.json"):
        load_from_json(tmp_path)


def test_missing_directory_is_a_load_error(tmp_path) -> None:
    with pytest.raises(DatasetLoadError):
        load_from_json(tmp_path / "nope")


def test_api_mode_reads_flat_team_rows() -> None:
    payload = {
        "teams": [{"id": 5, "team_id": 2, "team_name": "Hingham", "season_id": 11, "wins": 3, "losses": 1, "ties": 0}],
        "games": [],
        "players": [],
        "leagues": [],
        "divisions": [],
        "seasons": [{"id": 11, "name": "2018-2019"}],
        "staff": [],
    }
    session = _FakeSession(_FakeResponse(payload))
    dataset = load_from_api("http://example.test/api/data", timeout=5, session=session)
    assert session.calls == [("http://example.test/api/data", 5)]
    team = dataset.team_season("5")
    assert team.team_id == "2"
    assert team.overall.points == 6
    assert dataset.seasons[0].id == "11"


def test_api_errors_become_load_errors() -> None:
    with pytest.raises(DatasetLoadError, match="Could not connect"):
        load_from_api("http://x", session=_FakeSession(error=requests.ConnectionError("refused")))
    with pytest.raises(DatasetLoadError):
        load_from_api("http://x", session=_FakeSession(_FakeResponse({}, status=500)))
    with pytest.raises(DatasetLoadError, match="Database connection failed"):
        load_from_api("http://x", session=_FakeSession(_FakeResponse({"error": "Database connection failed"})))


def test_load_dataset_uses_configured_mode(sql_dir, tmp_path) -> None:
    output = tmp_path / "data"
    run_merge(sql_dir, output)
    settings = Settings(data_dir=str(output), data_mode="JSON")
    assert len(load_dataset(settings).players) == 2
