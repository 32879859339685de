"""Archive configuration: static constants plus environment-driven settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 2018-2019 is the season the public site opens on.
DEFAULT_SEASON_ID = "11"

INDEPENDENT_LEAGUE = "Independent"
UNKNOWN_NAME = "Unknown"
SEASON_SUFFIX = "Season"

POSITION_LABELS: dict[str, str] = {
    "G": "Goalie",
    "F": "Forward",
    "D": "Defense",
}
GOALIE_POSITION = "Goalie"
MISSING_GAA_SENTINEL = 99.0

GENDER_CODES: dict[str, str] = {
    "M": "M",
    "B": "M",
    "F": "F",
    "W": "F",
    "G": "F",
}

PAGE_SIZES: dict[str, int] = {
    "teams": 25,
    "cards": 15,
    "games": 25,
    "skaters": 20,
    "goalies": 20,
}

RECORD_SCOPES: tuple[tuple[str, str], ...] = (
    ("overall", ""),
    ("league", "league_"),
    ("qualifying", "qual_"),
    ("tournament", "tourn_"),
)


class Settings(BaseSettings):
    """Runtime settings, overridable from the environment or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    input_dir: str = Field(
        default="output_final",
        alias="HSHOCKEY_INPUT_DIR",
        description="Directory holding insert_<table>.sql dumps",
    )
    data_dir: str = Field(
        default="data",
        alias="HSHOCKEY_DATA_DIR",
        description="Directory the merged JSON dataset is written to and served from",
    )
    data_mode: Literal["JSON", "API"] = Field(
        default="JSON",
        alias="HSHOCKEY_DATA_MODE",
        description="Where the query engine loads its snapshot from",
    )
    api_url: str = Field(
        default="http://localhost:8000/api/data",
        alias="HSHOCKEY_API_URL",
        description="Dataset endpoint used in API mode",
    )
    api_timeout: float = Field(default=30.0, alias="HSHOCKEY_API_TIMEOUT", gt=0.0)
    search_debounce_ms: int = Field(default=300, alias="HSHOCKEY_SEARCH_DEBOUNCE_MS", ge=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )
    log_dir: str = Field(default="logs", alias="LOG_DIR")

    @field_validator("input_dir", "data_dir", "log_dir")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v or v.isspace():
            raise ValueError("Path cannot be empty or whitespace")
        return v

    @property
    def input_path(self) -> Path:
        return Path(self.input_dir)

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)


@lru_cache
def get_settings() -> Settings:
    return Settings()
