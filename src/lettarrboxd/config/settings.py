from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from lettarrboxd.models import SyncPreferences, TakeStrategy

CONFIG_PATH_ENV = "LETTARRBOXD_CONFIG"
SNAPSHOT_FILENAME = "movies.json"

_LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


class Settings(BaseModel):
    """Application configuration resolved from env vars and optional TOML files."""

    letterboxd_url: str | None = Field(default=None, alias="LETTERBOXD_URL")
    take_amount: int | None = Field(default=None, alias="LETTERBOXD_TAKE_AMOUNT", gt=0)
    take_strategy: TakeStrategy | None = Field(default=None, alias="LETTERBOXD_TAKE_STRATEGY")

    radarr_api_url: str | None = Field(default=None, alias="RADARR_API_URL")
    radarr_api_key: str | None = Field(default=None, alias="RADARR_API_KEY")
    quality_profile: str | None = Field(default=None, alias="RADARR_QUALITY_PROFILE")
    minimum_availability: str = Field(default="released", alias="RADARR_MINIMUM_AVAILABILITY")
    root_folder_id: int | None = Field(default=None, alias="RADARR_ROOT_FOLDER_ID")
    tags: list[str] = Field(default_factory=list, alias="RADARR_TAGS")
    add_unmonitored: bool = Field(default=False, alias="RADARR_ADD_UNMONITORED")
    dry_run: bool = Field(default=False, alias="DRY_RUN")

    data_dir: Path = Field(default=Path("/data"), alias="DATA_DIR")
    check_interval_minutes: int = Field(default=10, ge=10, alias="CHECK_INTERVAL_MINUTES")

    flaresolverr_url: str | None = Field(default=None, alias="FLARESOLVERR_URL")
    flaresolverr_max_timeout: int = Field(default=60000, gt=0, alias="FLARESOLVERR_MAX_TIMEOUT")
    flaresolverr_session: str | None = Field(default=None, alias="FLARESOLVERR_SESSION")

    log_level: Literal["error", "warn", "info", "debug"] = Field(default="info", alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "ignore",
        "frozen": True,
    }

    @model_validator(mode="after")
    def _check_take_pair(self) -> Settings:
        if (self.take_amount is None) != (self.take_strategy is None):
            raise ValueError(
                "When using movie limiting, both LETTERBOXD_TAKE_AMOUNT and "
                "LETTERBOXD_TAKE_STRATEGY must be specified",
            )
        return self

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / SNAPSHOT_FILENAME

    @property
    def logging_level(self) -> int:
        return _LOG_LEVELS[self.log_level]

    def require_radarr(self) -> None:
        """Ensure Radarr connection settings are available."""
        missing = [
            name
            for name, value in (
                ("RADARR_API_URL", self.radarr_api_url),
                ("RADARR_API_KEY", self.radarr_api_key),
            )
            if not value
        ]
        if missing:
            raise SettingsError(
                f"Missing {', '.join(missing)}. Configure environment or TOML file.",
            )

    def require_run(self) -> None:
        """Ensure everything a full scrape-and-sync run needs is configured."""
        missing = [
            name
            for name, value in (
                ("LETTERBOXD_URL", self.letterboxd_url),
                ("RADARR_API_URL", self.radarr_api_url),
                ("RADARR_API_KEY", self.radarr_api_key),
                ("RADARR_QUALITY_PROFILE", self.quality_profile),
            )
            if not value
        ]
        if missing:
            raise SettingsError(
                f"Missing {', '.join(missing)}. Configure environment or TOML file.",
            )

    def sync_preferences(self) -> SyncPreferences:
        if not self.quality_profile:
            raise SettingsError("RADARR_QUALITY_PROFILE must be configured to sync movies.")
        return SyncPreferences(
            quality_profile_name=self.quality_profile,
            minimum_availability=self.minimum_availability,
            root_folder_id=self.root_folder_id,
            tag_names=list(self.tags),
            add_unmonitored=self.add_unmonitored,
            dry_run=self.dry_run,
        )


class SettingsError(RuntimeError):
    """Raised when configuration cannot be resolved."""


@dataclass(frozen=True)
class SettingsLoadResult:
    settings: Settings
    source_path: Path | None


def load_settings(config_path: Path | None = None, *, load_env: bool = True) -> SettingsLoadResult:
    """Load settings from .env files, environment variables, and optional TOML configuration."""

    if load_env:
        load_dotenv()

    resolved_path = _determine_config_path(config_path)
    config_data: dict[str, Any] = {}

    if resolved_path and resolved_path.exists():
        try:
            with resolved_path.open("rb") as handle:
                toml_payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise SettingsError(f"Invalid TOML in {resolved_path}: {exc}") from exc
        config_data = _flatten_toml(toml_payload)

    env_data = _collect_env_overrides()
    merged = {**config_data, **env_data}

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as exc:
        raise SettingsError(str(exc)) from exc

    return SettingsLoadResult(settings=settings, source_path=resolved_path)


def _determine_config_path(config_path: Path | None) -> Path | None:
    if config_path:
        return config_path

    env_override = os.getenv(CONFIG_PATH_ENV)
    if env_override:
        return Path(env_override).expanduser().resolve()

    default_path = Path.home() / ".config" / "lettarrboxd" / "config.toml"
    return default_path if default_path.exists() else None


_TOML_FIELDS: dict[str, dict[str, str]] = {
    "letterboxd": {
        "url": "letterboxd_url",
        "take_amount": "take_amount",
        "take_strategy": "take_strategy",
    },
    "radarr": {
        "api_url": "radarr_api_url",
        "api_key": "radarr_api_key",
        "quality_profile": "quality_profile",
        "minimum_availability": "minimum_availability",
        "root_folder_id": "root_folder_id",
        "add_unmonitored": "add_unmonitored",
        "tags": "tags",
    },
    "flaresolverr": {
        "url": "flaresolverr_url",
        "max_timeout": "flaresolverr_max_timeout",
        "session": "flaresolverr_session",
    },
    "scheduler": {
        "check_interval_minutes": "check_interval_minutes",
        "data_dir": "data_dir",
        "dry_run": "dry_run",
    },
    "logging": {
        "level": "log_level",
    },
}


def _flatten_toml(payload: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}

    for section, fields in _TOML_FIELDS.items():
        section_cfg = payload.get(section, {})
        if not isinstance(section_cfg, dict):
            continue
        for key, field in fields.items():
            if key not in section_cfg:
                continue
            value = section_cfg[key]
            if field == "tags":
                result[field] = _split_tags(value)
            else:
                result[field] = value

    return result


def _split_tags(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(tag).strip() for tag in value if str(tag).strip()]
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return []


def _collect_env_overrides() -> dict[str, Any]:
    mapping: dict[str, str] = {
        "LETTERBOXD_URL": "letterboxd_url",
        "LETTERBOXD_TAKE_AMOUNT": "take_amount",
        "LETTERBOXD_TAKE_STRATEGY": "take_strategy",
        "RADARR_API_URL": "radarr_api_url",
        "RADARR_API_KEY": "radarr_api_key",
        "RADARR_QUALITY_PROFILE": "quality_profile",
        "RADARR_MINIMUM_AVAILABILITY": "minimum_availability",
        "RADARR_ROOT_FOLDER_ID": "root_folder_id",
        "RADARR_TAGS": "tags",
        "RADARR_ADD_UNMONITORED": "add_unmonitored",
        "DRY_RUN": "dry_run",
        "DATA_DIR": "data_dir",
        "CHECK_INTERVAL_MINUTES": "check_interval_minutes",
        "FLARESOLVERR_URL": "flaresolverr_url",
        "FLARESOLVERR_MAX_TIMEOUT": "flaresolverr_max_timeout",
        "FLARESOLVERR_SESSION": "flaresolverr_session",
        "LOG_LEVEL": "log_level",
    }

    result: dict[str, Any] = {}
    for env_name, field in mapping.items():
        value = os.environ.get(env_name)
        # Empty strings behave like unset variables (docker-compose passes them through)
        if value is None or value.strip() == "":
            continue
        if field in {"add_unmonitored", "dry_run"}:
            result[field] = value.strip().lower() == "true"
        elif field == "tags":
            result[field] = _split_tags(value)
        elif field == "log_level":
            result[field] = value.strip().lower()
        else:
            result[field] = value
    return result


__all__ = ["Settings", "SettingsError", "SettingsLoadResult", "load_settings"]
