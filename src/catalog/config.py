"""Application settings, read from the environment and ``.env``."""
from __future__ import annotations

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

IsolationLevel = Literal["READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str = "sqlite:///data/catalog.db"
    LOG_LEVEL: str = "INFO"

    SEARCH_DEFAULT_LIMIT: int = 20
    SEARCH_MAX_LIMIT: int = 100
    SEARCH_NO_PHRASE_RELEVANCE: float = 1.0
    SEARCH_TITLE_WEIGHT: float = 2.0
    SEARCH_DESCRIPTION_WEIGHT: float = 1.0
    SEARCH_LOCATION_WEIGHT: float = 1.0
    # None: count and page run at the driver's default isolation and may
    # observe different snapshots under concurrent writes.
    SEARCH_ISOLATION_LEVEL: IsolationLevel | None = None

    SUGGESTION_MIN_LENGTH: int = 2

    @field_validator(
        "SEARCH_TITLE_WEIGHT", "SEARCH_DESCRIPTION_WEIGHT", "SEARCH_LOCATION_WEIGHT",
    )
    @classmethod
    def weight_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("search weights must be >= 0")
        return v

    @field_validator("SEARCH_MAX_LIMIT")
    @classmethod
    def max_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("SEARCH_MAX_LIMIT must be >= 1")
        return v


settings = Settings()
