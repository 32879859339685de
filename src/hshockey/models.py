from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

RECORD_FIELDS = ("wins", "losses", "ties", "goals_for", "goals_against", "points")


def str_id(value: Any) -> str | None:
    """Canonical string form of an identifier (``5``, ``5.0`` and ``"5"`` agree)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def win_pct(wins: int, losses: int, ties: int, points: int | None = None) -> float | None:
    games = wins + losses + ties
    if games <= 0:
        return None
    pts = wins * 2 + ties if points is None else points
    return pts / (games * 2)


@dataclass(slots=True)
class Season:
    id: str
    name: str
    display_name: str = ""
    legacy_id: str | None = None
    start_year: int | None = None
    end_year: int | None = None
    start_date: str | None = None
    end_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Season:
        name = str(raw.get("name") or "")
        return cls(
            id=str_id(raw.get("id")) or "",
            name=name,
            display_name=str(raw.get("display_name") or name),
            legacy_id=str_id(raw.get("legacy_id")),
            start_year=raw.get("start_year"),
            end_year=raw.get("end_year"),
            start_date=raw.get("start_date"),
            end_date=raw.get("end_date"),
        )


@dataclass(slots=True)
class League:
    id: str
    name: str
    short_name: str | None = None
    gender: str | None = None
    legacy_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> League:
        return cls(
            id=str_id(raw.get("id")) or "",
            name=str(raw.get("name") or ""),
            short_name=raw.get("short_name"),
            gender=raw.get("gender"),
            legacy_id=str_id(raw.get("legacy_id")),
        )


@dataclass(slots=True)
class Division:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Division:
        return cls(id=str_id(raw.get("id")) or "", name=str(raw.get("name") or ""))


@dataclass(slots=True)
class Venue:
    id: str
    name: str | None = None
    city: str | None = None
    address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Venue:
        return cls(
            id=str_id(raw.get("id")) or "",
            name=raw.get("name"),
            city=raw.get("city"),
            address=raw.get("address"),
        )


@dataclass(slots=True)
class Record:
    wins: int = 0
    losses: int = 0
    ties: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0
    win_pct: float | None = None

    @classmethod
    def build(
        cls,
        wins: Any = 0,
        losses: Any = 0,
        ties: Any = 0,
        goals_for: Any = 0,
        goals_against: Any = 0,
        points: Any = None,
        pct: Any = None,
    ) -> Record:
        w, l, t = as_int(wins), as_int(losses), as_int(ties)
        # A zero/absent points column means "not supplied", not an override.
        pts = as_int(points) or w * 2 + t
        explicit_pct = as_float(pct)
        return cls(
            wins=w,
            losses=l,
            ties=t,
            goals_for=as_int(goals_for),
            goals_against=as_int(goals_against),
            points=pts,
            win_pct=explicit_pct if explicit_pct is not None else win_pct(w, l, t, pts),
        )

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def goal_diff(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def summary(self) -> str:
        return f"{self.wins}-{self.losses}-{self.ties}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> Record:
        raw = raw or {}
        return cls.build(
            raw.get("wins"),
            raw.get("losses"),
            raw.get("ties"),
            raw.get("goals_for"),
            raw.get("goals_against"),
            raw.get("points"),
            raw.get("win_pct"),
        )


@dataclass(slots=True)
class TeamSeason:
    id: str
    team_id: str | None
    team_name: str
    season_id: str | None
    season_name: str
    gender: str | None = None
    league_id: str | None = None
    league_name: str | None = None
    division_id: str | None = None
    division_name: str | None = None
    overall: Record = field(default_factory=Record)
    league: Record = field(default_factory=Record)
    qualifying: Record = field(default_factory=Record)
    tournament: Record = field(default_factory=Record)

    RECORD_SCOPES: ClassVar[tuple[str, ...]] = ("overall", "league", "qualifying", "tournament")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> TeamSeason:
        # The SQL-backed endpoint returns a flat row; the merged files nest records.
        overall = raw.get("overall")
        if not isinstance(overall, dict):
            overall = {key: raw.get(key) for key in (*RECORD_FIELDS, "win_pct")}
        return cls(
            id=str_id(raw.get("id")) or "",
            team_id=str_id(raw.get("team_id")),
            team_name=str(raw.get("team_name") or ""),
            season_id=str_id(raw.get("season_id")),
            season_name=str(raw.get("season_name") or ""),
            gender=raw.get("gender"),
            league_id=str_id(raw.get("league_id")),
            league_name=raw.get("league_name"),
            division_id=str_id(raw.get("division_id")),
            division_name=raw.get("division_name"),
            overall=Record.from_dict(overall),
            league=Record.from_dict(raw.get("league") if isinstance(raw.get("league"), dict) else None),
            qualifying=Record.from_dict(raw.get("qualifying")),
            tournament=Record.from_dict(raw.get("tournament")),
        )


@dataclass(slots=True)
class Game:
    id: str
    season_id: str | None
    date: str | None
    timestamp: int | None = None
    season_name: str = ""
    home_team_id: str | None = None
    home_team: str = ""
    home_team_season_id: str | None = None
    home_score: int | None = None
    away_team_id: str | None = None
    away_team: str = ""
    away_team_season_id: str | None = None
    away_score: int | None = None
    venue: str | None = None
    location_id: str | None = None
    event_desc: str | None = None
    status: str = "1"
    do_not_include_in_record: int = 0
    exempt_home_team: int = 0
    exempt_visit_team: int = 0

    @property
    def is_scored(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    def result_for(self, team_season_id: str) -> tuple[str, str]:
        """Return (result letter, "for-against" score) from one participant's side."""
        if not self.is_scored:
            return "-", "-"
        is_home = self.home_team_season_id == team_season_id
        ours = self.home_score if is_home else self.away_score
        theirs = self.away_score if is_home else self.home_score
        if ours > theirs:
            result = "W"
        elif ours < theirs:
            result = "L"
        else:
            result = "T"
        return result, f"{ours}-{theirs}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Game:
        timestamp = raw.get("timestamp")
        return cls(
            id=str_id(raw.get("id")) or "",
            season_id=str_id(raw.get("season_id")),
            date=raw.get("date"),
            timestamp=as_int(timestamp) if timestamp is not None else None,
            season_name=str(raw.get("season_name") or ""),
            home_team_id=str_id(raw.get("home_team_id")),
            home_team=str(raw.get("home_team") or ""),
            home_team_season_id=str_id(raw.get("home_team_season_id")),
            home_score=None if raw.get("home_score") is None else as_int(raw.get("home_score")),
            away_team_id=str_id(raw.get("away_team_id")),
            away_team=str(raw.get("away_team") or ""),
            away_team_season_id=str_id(raw.get("away_team_season_id")),
            away_score=None if raw.get("away_score") is None else as_int(raw.get("away_score")),
            venue=raw.get("venue"),
            location_id=str_id(raw.get("location_id")),
            event_desc=raw.get("event_desc"),
            status=str(raw.get("status") or "1"),
            do_not_include_in_record=as_int(raw.get("do_not_include_in_record")),
            exempt_home_team=as_int(raw.get("exempt_home_team")),
            exempt_visit_team=as_int(raw.get("exempt_visit_team")),
        )


@dataclass(slots=True)
class PlayerSeason:
    id: str
    player_id: str | None
    first_name: str
    last_name: str
    name: str
    position: str
    team_id: str | None = None
    team_name: str = ""
    team_season_id: str | None = None
    season_id: str | None = None
    season_name: str = ""
    number: int | None = None
    year: str = ""
    hometown: str = ""
    is_captain: bool = False
    goals: int = 0
    assists: int = 0
    points: int = 0
    games_played: float = 0
    penalty_minutes: int = 0
    goals_against: int = 0
    goals_against_average: float | None = None
    saves: int = 0
    shots: int = 0
    save_percentage: float | None = None
    shutouts: int = 0
    minutes: float = 0

    @property
    def is_goalie(self) -> bool:
        return self.position == "Goalie"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PlayerSeason:
        first = str(raw.get("first_name") or "")
        last = str(raw.get("last_name") or "")
        goals = as_int(raw.get("goals"))
        assists = as_int(raw.get("assists"))
        number = raw.get("number")
        return cls(
            id=str_id(raw.get("id")) or "",
            player_id=str_id(raw.get("player_id")),
            first_name=first,
            last_name=last,
            name=str(raw.get("name") or f"{first} {last}".strip()),
            position=str(raw.get("position") or "-"),
            team_id=str_id(raw.get("team_id")),
            team_name=str(raw.get("team_name") or ""),
            team_season_id=str_id(raw.get("team_season_id")),
            season_id=str_id(raw.get("season_id")),
            season_name=str(raw.get("season_name") or ""),
            number=None if number in (None, "") else as_int(number),
            year=str(raw.get("year") or ""),
            hometown=str(raw.get("hometown") or ""),
            is_captain=bool(raw.get("is_captain")),
            goals=goals,
            assists=assists,
            points=goals + assists,
            games_played=as_float(raw.get("games_played")) or 0,
            penalty_minutes=as_int(raw.get("penalty_minutes")),
            goals_against=as_int(raw.get("goals_against")),
            goals_against_average=as_float(raw.get("goals_against_average")),
            saves=as_int(raw.get("saves")),
            shots=as_int(raw.get("shots")),
            save_percentage=as_float(raw.get("save_percentage")),
            shutouts=as_int(raw.get("shutouts")),
            minutes=as_float(raw.get("minutes")) or 0,
        )


@dataclass(slots=True)
class StaffAssignment:
    team_id: str | None
    team_name: str
    team_gender: str | None = None


@dataclass(slots=True)
class Staff:
    staff_id: str
    first_name: str
    last_name: str
    name: str
    role: str | None = None
    teams: list[StaffAssignment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Staff:
        first = str(raw.get("first_name") or "")
        last = str(raw.get("last_name") or "")
        raw_teams = raw.get("teams")
        if not isinstance(raw_teams, list):
            # Flat rows carry a single assignment each.
            raw_teams = [raw] if raw.get("team_id") is not None else []
        return cls(
            staff_id=str_id(raw.get("staff_id")) or "",
            first_name=first,
            last_name=last,
            name=str(raw.get("name") or f"{first} {last}".strip()),
            role=raw.get("role"),
            teams=[
                StaffAssignment(
                    team_id=str_id(row.get("team_id")),
                    team_name=str(row.get("team_name") or ""),
                    team_gender=row.get("team_gender"),
                )
                for row in raw_teams
                if isinstance(row, dict)
            ],
        )


@dataclass(slots=True)
class Dataset:
    """Read-only snapshot consumed by the query engine."""

    seasons: list[Season] = field(default_factory=list)
    leagues: list[League] = field(default_factory=list)
    divisions: list[Division] = field(default_factory=list)
    teams: list[TeamSeason] = field(default_factory=list)
    games: list[Game] = field(default_factory=list)
    players: list[PlayerSeason] = field(default_factory=list)
    staff: list[Staff] = field(default_factory=list)
    venues: list[Venue] = field(default_factory=list)

    def team_season(self, team_season_id: str | None) -> TeamSeason | None:
        if not team_season_id:
            return None
        for team in self.teams:
            if team.id == team_season_id:
                return team
        return None

    def player_season(self, player_season_id: str | None) -> PlayerSeason | None:
        if not player_season_id:
            return None
        for player in self.players:
            if player.id == player_season_id:
                return player
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "seasons": [s.to_dict() for s in self.seasons],
            "leagues": [l.to_dict() for l in self.leagues],
            "divisions": [d.to_dict() for d in self.divisions],
            "teams": [t.to_dict() for t in self.teams],
            "games": [g.to_dict() for g in self.games],
            "players": [p.to_dict() for p in self.players],
            "staff": [s.to_dict() for s in self.staff],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Dataset:
        def rows(key: str) -> list[dict[str, Any]]:
            value = raw.get(key)
            return [row for row in value if isinstance(row, dict)] if isinstance(value, list) else []

        return cls(
            seasons=[Season.from_dict(r) for r in rows("seasons")],
            leagues=[League.from_dict(r) for r in rows("leagues")],
            divisions=[Division.from_dict(r) for r in rows("divisions")],
            teams=[TeamSeason.from_dict(r) for r in rows("teams")],
            games=[Game.from_dict(r) for r in rows("games")],
            players=[PlayerSeason.from_dict(r) for r in rows("players")],
            staff=_merge_staff_rows(rows("staff")),
            venues=[Venue.from_dict(r) for r in rows("venues") or rows("locations")],
        )


def _merge_staff_rows(rows: list[dict[str, Any]]) -> list[Staff]:
    merged: dict[str, Staff] = {}
    for row in rows:
        staff = Staff.from_dict(row)
        existing = merged.get(staff.staff_id)
        if existing is None:
            merged[staff.staff_id] = staff
        else:
            existing.teams.extend(staff.teams)
    return list(merged.values())
