"""Per-table column sorting.

Field lookups go through an accessor table built once at import time, so a
team's ``wins`` column always reads ``team.overall.wins`` and ``win_pct`` is
always derived from wins/losses/ties.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Mapping, TypeVar

from .models import RECORD_FIELDS, win_pct

T = TypeVar("T")
Accessor = Callable[[Any], Any]

SORT_TABLES = ("teams", "games", "skaters", "goalies")
DIRECTIONS = ("asc", "desc")

_NUMERIC_RE = re.compile(r"^\s*-?(\d+(\.\d*)?|\.\d+)\s*$")


@dataclass(frozen=True, slots=True)
class SortSpec:
    key: str
    direction: str = "asc"


SortState = Mapping[str, SortSpec]


def _overall_field(key: str) -> Accessor:
    def read(obj: Any) -> Any:
        return getattr(obj.overall, key)

    return read


def synthetic_win_pct(obj: Any) -> float | None:
    record = getattr(obj, "overall", obj)
    return win_pct(getattr(record, "wins", 0) or 0, getattr(record, "losses", 0) or 0, getattr(record, "ties", 0) or 0)


def _build_accessors() -> dict[str, dict[str, Accessor]]:
    team_accessors: dict[str, Accessor] = {key: _overall_field(key) for key in RECORD_FIELDS}
    team_accessors["win_pct"] = synthetic_win_pct
    team_accessors["games_played"] = lambda team: team.overall.games_played
    team_accessors["goal_diff"] = lambda team: team.overall.goal_diff
    return {
        "teams": team_accessors,
        "games": {"win_pct": synthetic_win_pct},
        "skaters": {"win_pct": synthetic_win_pct},
        "goalies": {"win_pct": synthetic_win_pct},
    }


ACCESSORS = _build_accessors()


def accessor_for(table: str, key: str) -> Accessor:
    if table not in ACCESSORS:
        raise ValueError(f"Unknown sort table: {table}")
    accessor = ACCESSORS[table].get(key)
    if accessor is not None:
        return accessor
    return lambda obj: getattr(obj, key, None)


def next_direction(current: SortSpec | None, key: str) -> str:
    if current is None or current.key != key:
        return "asc"
    return "desc" if current.direction == "asc" else "asc"


def toggle_sort(sort_state: SortState, table: str, key: str) -> tuple[dict[str, SortSpec], SortSpec]:
    """Advance ``key`` on ``table`` one step; any other active column on that table is cleared."""
    if table not in SORT_TABLES:
        raise ValueError(f"Unknown sort table: {table}")
    spec = SortSpec(key=key, direction=next_direction(sort_state.get(table), key))
    updated = dict(sort_state)
    updated[table] = spec
    return updated, spec


def as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _NUMERIC_RE.match(value):
        return float(value)
    return None


def compare_values(a: Any, b: Any) -> int:
    a_num, b_num = as_number(a), as_number(b)
    if a_num is not None and b_num is not None:
        return (a_num > b_num) - (a_num < b_num)
    a_text, b_text = str(a).casefold(), str(b).casefold()
    return (a_text > b_text) - (a_text < b_text)


def sort_records(records: Iterable[T], table: str, key: str, direction: str = "asc") -> list[T]:
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {direction}")
    read = accessor_for(table, key)
    present: list[tuple[Any, T]] = []
    missing: list[T] = []
    for record in records:
        value = read(record)
        if value is None or value == "":
            missing.append(record)
        else:
            present.append((value, record))
    present.sort(key=cmp_to_key(lambda x, y: compare_values(x[0], y[0])), reverse=direction == "desc")
    return [record for _, record in present] + missing
