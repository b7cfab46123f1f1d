"""
Configuration Management for spendqueue

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The state file location is resolved once and then handed explicitly to
the storage layer, so tests can point it at an isolated path.
"""

import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_state_file() -> Path:
    """Per-user location of the state document: ~/.config/sq/state.json"""
    return Path.home() / ".config" / "sq" / "state.json"


def default_opener_command() -> str:
    if sys.platform == "darwin":
        return "open"
    return "xdg-open"


class StorageSettings(BaseSettings):
    """Where the state document lives."""

    model_config = SettingsConfigDict(
        env_prefix="SQ_",
        extra="ignore"
    )

    state_file: Path = Field(
        default_factory=default_state_file,
        description="Path to the JSON state document"
    )

    @field_validator('state_file')
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class OpenerSettings(BaseSettings):
    """External program used to open purchase links."""

    model_config = SettingsConfigDict(
        env_prefix="SQ_OPENER_",
        extra="ignore"
    )

    command: str = Field(
        default_factory=default_opener_command,
        min_length=1,
        description="Executable invoked with the purchase URL as its only argument"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SQ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="WARNING",
        description="Level for the audit log on stderr"
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console key=value"
    )

    default_interval_days: int = Field(
        default=30,
        ge=1,
        description="Interval used by `budget` when --interval is omitted"
    )
    bump_seed: Optional[int] = Field(
        default=None,
        description="Seed for the bump random source (reproducible reordering)"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def opener(self) -> OpenerSettings:
        return OpenerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
