"""Team page locations: ``season-slug/team-slug`` path fragments.

A fragment resolves back to a team-season in two passes. The first pass
wants an exact normalized season match; the second accepts a season name
that contains the slug or is contained by it. The first team found wins in
either pass, so two team-seasons with the same normalized name in
overlapping seasons resolve to the earlier one in dataset order.
"""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import unquote

from .models import TeamSeason

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_STRIP_RE = re.compile(r"[^a-z0-9]")


def season_slug(season_name: str | None) -> str:
    return (season_name or "").split(" ")[0].lower()


def team_slug(team_name: str | None) -> str:
    return _NON_ALNUM_RE.sub("-", (team_name or "").lower()).strip("-")


def team_path(team: TeamSeason) -> str:
    return f"{season_slug(team.season_name)}/{team_slug(team.team_name)}"


def team_url(team: TeamSeason) -> str:
    return f"#/{team_path(team)}"


def normalize(text: str | None) -> str:
    return _STRIP_RE.sub("", (text or "").lower())


def _season_key(team: TeamSeason) -> str:
    return normalize(team.season_name).replace("season", "")


def find_team_by_path(teams: Iterable[TeamSeason], season: str, team: str) -> TeamSeason | None:
    wanted_season = normalize(season)
    wanted_team = normalize(team)
    candidates = [t for t in teams if normalize(t.team_name) == wanted_team]

    for candidate in candidates:
        if _season_key(candidate) == wanted_season:
            return candidate
    for candidate in candidates:
        stored = _season_key(candidate)
        if wanted_season in stored or stored in wanted_season:
            return candidate
    return None


def parse_route(route: str) -> tuple[str, str] | None:
    """Split ``#/season/team`` (or ``/season/team``) into its two slugs."""
    path = route[1:] if route.startswith("#") else route
    if not path.startswith("/"):
        return None
    parts = path[1:].split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return unquote(parts[0]), unquote(parts[1])


def resolve_route(teams: Iterable[TeamSeason], route: str) -> TeamSeason | None:
    parsed = parse_route(route)
    if parsed is None:
        return None
    return find_team_by_path(teams, *parsed)
