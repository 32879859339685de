from __future__ import annotations

from pathlib import Path

import pytest

from hshockey.models import Dataset, Division, Game, League, PlayerSeason, Record, Season, TeamSeason


def _team(
    ts_id: str,
    team_id: str,
    name: str,
    season_id: str,
    gender: str,
    league: tuple[str, str] | None,
    division: tuple[str, str] | None,
    record: tuple[int, int, int, int, int],
) -> TeamSeason:
    season_names = {"10": "2017-2018 Season", "11": "2018-2019 Season"}
    wins, losses, ties, gf, ga = record
    return TeamSeason(
        id=ts_id,
        team_id=team_id,
        team_name=name,
        season_id=season_id,
        season_name=season_names[season_id],
        gender=gender,
        league_id=league[0] if league else None,
        league_name=league[1] if league else "Independent",
        division_id=division[0] if division else None,
        division_name=division[1] if division else None,
        overall=Record.build(wins, losses, ties, gf, ga),
        league=Record.build(wins, losses, 0, gf, ga),
    )


def _game(game_id: str, season_id: str, date: str, home: TeamSeason, away: TeamSeason, score: tuple | None) -> Game:
    return Game(
        id=game_id,
        season_id=season_id,
        date=date,
        timestamp=int(date.replace("-", "")),
        season_name=home.season_name,
        home_team_id=home.team_id,
        home_team=home.team_name,
        home_team_season_id=home.id,
        home_score=score[0] if score else None,
        away_team_id=away.team_id,
        away_team=away.team_name,
        away_team_season_id=away.id,
        away_score=score[1] if score else None,
        venue="Rink",
    )


def _player(
    ps_id: str,
    name: str,
    team: TeamSeason,
    position: str,
    goals: int = 0,
    assists: int = 0,
    **stats,
) -> PlayerSeason:
    first, last = name.split(" ", 1)
    return PlayerSeason(
        id=ps_id,
        player_id=f"p{ps_id}",
        first_name=first,
        last_name=last,
        name=name,
        position=position,
        team_id=team.team_id,
        team_name=team.team_name,
        team_season_id=team.id,
        season_id=team.season_id,
        season_name=team.season_name,
        goals=goals,
        assists=assists,
        points=goals + assists,
        **stats,
    )


@pytest.fixture
def dataset() -> Dataset:
    catholic = ("1", "Catholic Conference")
    bay_state = ("2", "Bay State Conference")
    div1 = ("1", "Division 1")
    div2 = ("2", "Division 2")
    super8 = ("3", "Super 8")

    prep = _team("100", "1", "St. John's Prep", "11", "M", catholic, div1, (10, 3, 2, 50, 30))
    xaverian = _team("101", "2", "Xaverian", "11", "M", catholic, div2, (5, 5, 0, 30, 31))
    wellesley = _team("102", "3", "Wellesley", "11", "F", bay_state, div2, (0, 0, 0, 0, 0))
    needham = _team("103", "4", "Needham", "11", "F", None, super8, (8, 2, 0, 40, 12))
    prep_2018 = _team("90", "1", "St. John's Prep", "10", "M", catholic, div1, (12, 4, 1, 60, 25))
    xaverian_2018 = _team("91", "2", "Xaverian", "10", "M", catholic, div1, (3, 10, 1, 20, 44))

    return Dataset(
        seasons=[
            Season(id="10", name="2017-2018", display_name="2017-2018 Season"),
            Season(id="11", name="2018-2019", display_name="2018-2019 Season"),
        ],
        leagues=[League(id="1", name="Catholic Conference"), League(id="2", name="Bay State Conference")],
        divisions=[Division(id="1", name="Division 1"), Division(id="2", name="Division 2"), Division(id="3", name="Super 8")],
        teams=[prep, xaverian, wellesley, needham, prep_2018, xaverian_2018],
        games=[
            _game("1", "11", "2019-01-05", prep, xaverian, (4, 2)),
            _game("2", "11", "2019-01-03", wellesley, needham, (1, 1)),
            _game("3", "11", "2019-02-01", xaverian, prep, None),
            _game("4", "10", "2018-01-20", prep_2018, xaverian_2018, (3, 1)),
            _game("5", "11", "2019-01-10", prep, wellesley, (2, 3)),
        ],
        players=[
            _player("500", "Jack Smith", prep, "Forward", 10, 5, games_played=15, penalty_minutes=4),
            _player("501", "Mike Jones", prep, "Defense", 2, 8, games_played=15, penalty_minutes=10),
            _player(
                "502", "Sam Keeper", prep, "Goalie",
                games_played=10, goals_against=21, goals_against_average=2.1, saves=200, shots=221, shutouts=2,
            ),
            _player("503", "Ann Lee", wellesley, "Forward", 7, 7, games_played=12),
            _player("504", "Jack Smith", prep_2018, "Forward", 6, 4, games_played=14, penalty_minutes=2),
            _player("505", "Pat Backup", xaverian, "Goalie", games_played=2),
            _player(
                "400", "Sam Keeper", prep_2018, "Goalie",
                games_played=15, goals_against=30, goals_against_average=2.0, saves=300, shots=330, shutouts=1,
            ),
        ],
    )


SAMPLE_SQL = {
    "insert_seasons.sql": """-- seasons
INSERT INTO seasons (id, name, start_date, end_date) VALUES
(10, '2017-2018', '2017-11-01', '2018-03-31'),
(11, '2018-2019 Season', '2018-11-01', '2019-03-31');
""",
    "insert_leagues.sql": """INSERT INTO leagues (id, name, short_name, gender) VALUES
(1, 'Catholic Conference', 'CC', 'B'),
(2, 'Bay State Conference', 'BSC', 'G');
""",
    "insert_divisions.sql": """INSERT INTO divisions (id, name) VALUES
(1, 'Division 1'),
(2, 'Division 2');
""",
    "insert_venues.sql": """INSERT INTO venues (id, name, city) VALUES
(7, 'Warrior Ice Arena', 'Boston');
""",
    "insert_teams.sql": """INSERT INTO teams (id, name, gender) VALUES
(1, 'St. John\\'s Prep', 'M'),
(2, "Xaverian", NULL),
(3, 'Wellesley', 'F'),
(4, 'Broken', 'M', 'extra');
""",
    "insert_team_seasons.sql": """INSERT INTO team_seasons (id, team_id, season_id, league_id, division_id, wins, losses, ties, goals_for, goals_against, points, league_wins, league_losses, league_ties, league_goals_for, league_goals_against, league_points) VALUES
(100, 1, 11, 1, 1, 10, 3, 2, 50, 30, NULL, 6, 1, 1, 25, 10, NULL),
(101, 2, 11, 1, 2, 5, 5, 0, 30, 31, 12, 3, 3, 0, 15, 15, NULL),
(102, 3, 11, 99, 2, 0, 0, 0, 0, 0, NULL, 0, 0, 0, 0, 0, NULL);
""",
    "insert_games.sql": """INSERT INTO games (id, season_id, game_date, home_team_id, away_team_id, home_score, away_score, venue_id, counts_for_record) VALUES
(1, 11, '2019-01-05', 1, 2, 4, 2, 7, 1),
(2, 11, '2019-01-12', 2, 1, NULL, NULL, NULL, 1),
(3, 11, '2019-01-19', 3, 42, 1, 1, 7, 0);
""",
    "insert_players.sql": """INSERT INTO players (id, first_name, last_name) VALUES
(1, 'Jack', 'Smith'),
(2, 'Sam', 'Keeper');
""",
    "insert_player_seasons.sql": """INSERT INTO player_seasons (id, player_id, team_season_id, position, jersey_number, year, goals, assists, games_played, goals_against_average, save_percentage, is_captain) VALUES
(500, 1, 100, 'F', '9', 'Sr', 10, 5, 15, NULL, NULL, 'Y'),
(502, 2, 100, 'G', 'n/a', 'Jr', 0, 1, 10, 2.1, 0.905, NULL);
""",
}


@pytest.fixture
def sql_dir(tmp_path) -> Path:
    input_dir = tmp_path / "sql"
    input_dir.mkdir()
    for filename, text in SAMPLE_SQL.items():
        (input_dir / filename).write_text(text, encoding="utf-8")
    return input_dir
