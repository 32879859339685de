"""Snapshot loading for the query engine.

Two sources are supported: the merged JSON files on disk, or the read-only
``/api/data`` endpoint. Either all required collections load or the whole
load fails.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import requests

from .config import Settings
from .logging import get_logger
from .models import Dataset

logger = get_logger(__name__)

REQUIRED_FILES: dict[str, tuple[str, ...]] = {
    "teams": ("team_seasons.json", "teams.json"),
    "games": ("games.json",),
    "players": ("players.json",),
    "leagues": ("leagues.json",),
    "divisions": ("divisions.json",),
    "seasons": ("seasons.json",),
}
OPTIONAL_FILES: dict[str, str] = {
    "locations": "locations.json",
    "venues": "venues.json",
    "staff": "staff.json",
}


class DatasetLoadError(RuntimeError):
    """Raised when any required collection cannot be loaded."""


def _read_collection(data_dir: Path, candidates: tuple[str, ...]) -> list[Any]:
    for filename in candidates:
        path = data_dir / filename
        if not path.exists():
            continue
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise DatasetLoadError(f"Could not read {filename}: {exc}") from exc
        if not isinstance(payload, list):
            raise DatasetLoadError(f"{filename} does not contain a JSON array")
        return payload
    raise DatasetLoadError(f"Missing data file: {candidates[0]}")


def _read_optional(data_dir: Path, filename: str) -> list[Any]:
    try:
        return _read_collection(data_dir, (filename,))
    except DatasetLoadError:
        return []


def load_from_json(data_dir: str | Path) -> Dataset:
    path = Path(data_dir)
    if not path.is_dir():
        raise DatasetLoadError(f"Data directory not found: {path}")

    with ThreadPoolExecutor(max_workers=len(REQUIRED_FILES) + len(OPTIONAL_FILES)) as pool:
        required = {key: pool.submit(_read_collection, path, names) for key, names in REQUIRED_FILES.items()}
        optional = {key: pool.submit(_read_optional, path, name) for key, name in OPTIONAL_FILES.items()}
        raw: dict[str, Any] = {key: future.result() for key, future in required.items()}
        raw.update({key: future.result() for key, future in optional.items()})

    dataset = Dataset.from_dict(raw)
    logger.info(
        "Data loaded: teams={} games={} players={} seasons={}",
        len(dataset.teams),
        len(dataset.games),
        len(dataset.players),
        len(dataset.seasons),
    )
    return dataset


def load_from_api(url: str, timeout: float = 30.0, session: requests.Session | None = None) -> Dataset:
    http = session or requests.Session()
    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        raise DatasetLoadError(f"Could not connect to data API: {exc}") from exc
    except ValueError as exc:
        raise DatasetLoadError("Invalid API response") from exc
    if not isinstance(payload, dict):
        raise DatasetLoadError("Invalid API response")
    if "error" in payload and "teams" not in payload:
        raise DatasetLoadError(str(payload["error"]))
    return Dataset.from_dict(payload)


def load_dataset(settings: Settings) -> Dataset:
    logger.info("Loading data in {} mode", settings.data_mode)
    if settings.data_mode == "API":
        return load_from_api(settings.api_url, timeout=settings.api_timeout)
    if settings.data_mode == "JSON":
        return load_from_json(settings.data_path)
    raise DatasetLoadError(f"Invalid data mode configured: {settings.data_mode}")
