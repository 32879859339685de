from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .config import GOALIE_POSITION, INDEPENDENT_LEAGUE, MISSING_GAA_SENTINEL
from .models import Game, PlayerSeason, Record, TeamSeason, win_pct


@dataclass(slots=True)
class StandingsGroup:
    league_name: str
    teams: list[TeamSeason] = field(default_factory=list)


def record_win_pct(record: Record) -> float | None:
    """Win percentage as points over available points; None for a zero-game record."""
    if record.games_played <= 0:
        return None
    if record.win_pct is not None:
        return record.win_pct
    return win_pct(record.wins, record.losses, record.ties, record.points or None)


def format_win_pct(record: Record | None) -> str:
    if record is None or record.games_played <= 0:
        return "-"
    points = record.wins * 2 + record.ties
    return f"{points / (record.games_played * 2) * 100:.1f}%"


def record_points(record: Record) -> int:
    return record.points or (record.wins * 2 + record.ties)


def standings_sort_key(team: TeamSeason) -> tuple[int, float, int]:
    pct = record_win_pct(team.overall)
    # Zero-game teams rank below every team that has played.
    return (0 if pct is None else 1, pct or 0.0, record_points(team.overall))


def league_group_key(name: str) -> tuple[int, str]:
    return (1 if "independent" in name.lower() else 0, name.casefold())


def build_standings(teams: Iterable[TeamSeason]) -> list[StandingsGroup]:
    groups: dict[str, list[TeamSeason]] = {}
    for team in teams:
        groups.setdefault(team.league_name or INDEPENDENT_LEAGUE, []).append(team)
    return [
        StandingsGroup(league_name=name, teams=sorted(groups[name], key=standings_sort_key, reverse=True))
        for name in sorted(groups, key=league_group_key)
    ]


def goalie_sort_key(player: PlayerSeason) -> float:
    gaa = player.goals_against_average
    # A GAA with no games behind it is not a recorded GAA.
    if gaa is None or player.games_played <= 0:
        return MISSING_GAA_SENTINEL
    return gaa


def split_players(players: Iterable[PlayerSeason]) -> tuple[list[PlayerSeason], list[PlayerSeason]]:
    """Partition into (skaters by points desc, goalies by GAA asc)."""
    skaters: list[PlayerSeason] = []
    goalies: list[PlayerSeason] = []
    for player in players:
        (goalies if player.position == GOALIE_POSITION else skaters).append(player)
    skaters.sort(key=lambda p: p.points, reverse=True)
    goalies.sort(key=goalie_sort_key)
    return skaters, goalies


def team_summary(teams: list[TeamSeason]) -> dict[str, int]:
    return {
        "teams": len(teams),
        "total_games": sum(t.overall.games_played for t in teams),
        "total_wins": sum(t.overall.wins for t in teams),
    }


def game_summary(games: list[Game]) -> dict[str, int]:
    scored = [g for g in games if g.is_scored]
    return {
        "games": len(games),
        "scored": len(scored),
        "total_goals": sum(g.home_score + g.away_score for g in scored),
    }


def player_summary(skaters: list[PlayerSeason], goalies: list[PlayerSeason]) -> dict[str, int]:
    return {
        "skaters": len(skaters),
        "goalies": len(goalies),
        "total_goals": sum(p.goals for p in skaters),
        "total_assists": sum(p.assists for p in skaters),
    }
