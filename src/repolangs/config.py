"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (REPOLANGS__CACHE__ENABLED=false)
  2. repolangs.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("repolangs")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "cache.db")


def _find_config_file() -> str | None:
    """Return the path of the first repolangs.yaml found, or None."""
    candidates = [
        Path("repolangs.yaml"),
        Path(platformdirs.user_config_dir("repolangs")) / "repolangs.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class GitHubSettings(BaseModel):
    api_url: str = "https://api.github.com"
    per_page: int = Field(default=10, ge=1, le=100)
    request_timeout_seconds: float = 30.0
    user_agent: str = "repolangs/1.0"
    # None means a hung request hangs the whole aggregation
    aggregation_timeout_seconds: float | None = None


class CacheSettings(BaseModel):
    enabled: bool = True
    db_path: str = _DEFAULT_DB_PATH
    retention_days: int = 7


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: REPOLANGS__GITHUB__PER_PAGE=50
        env_prefix="REPOLANGS__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    github: GitHubSettings = GitHubSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )
