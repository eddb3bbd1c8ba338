"""Tests for settings resolution."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from lettarrboxd.config import Settings, SettingsError, load_settings
from lettarrboxd.models import TakeStrategy

ENV_VARS = (
    "LETTERBOXD_URL",
    "LETTERBOXD_TAKE_AMOUNT",
    "LETTERBOXD_TAKE_STRATEGY",
    "RADARR_API_URL",
    "RADARR_API_KEY",
    "RADARR_QUALITY_PROFILE",
    "RADARR_MINIMUM_AVAILABILITY",
    "RADARR_ROOT_FOLDER_ID",
    "RADARR_TAGS",
    "RADARR_ADD_UNMONITORED",
    "DRY_RUN",
    "DATA_DIR",
    "CHECK_INTERVAL_MINUTES",
    "FLARESOLVERR_URL",
    "FLARESOLVERR_MAX_TIMEOUT",
    "FLARESOLVERR_SESSION",
    "LOG_LEVEL",
    "LETTARRBOXD_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep ~/.config/lettarrboxd/config.toml of the developer out of the picture
    monkeypatch.setenv("HOME", str(tmp_path))


class TestSettingsModel:
    def test_defaults(self):
        settings = Settings()

        assert settings.letterboxd_url is None
        assert settings.minimum_availability == "released"
        assert settings.check_interval_minutes == 10
        assert settings.data_dir == Path("/data")
        assert settings.snapshot_path == Path("/data/movies.json")
        assert settings.flaresolverr_max_timeout == 60000
        assert settings.logging_level == logging.INFO
        assert not settings.dry_run
        assert not settings.add_unmonitored

    def test_take_amount_without_strategy_is_rejected(self):
        with pytest.raises(ValidationError, match="LETTERBOXD_TAKE_STRATEGY"):
            Settings(take_amount=5)

    def test_take_strategy_without_amount_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(take_strategy="oldest")

    def test_take_pair(self):
        settings = Settings(take_amount=5, take_strategy="newest")

        assert settings.take_strategy is TakeStrategy.NEWEST

    def test_take_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(take_amount=0, take_strategy="newest")

    def test_check_interval_minimum(self):
        with pytest.raises(ValidationError):
            Settings(check_interval_minutes=5)

    def test_require_run_lists_missing_values(self):
        settings = Settings(letterboxd_url="https://letterboxd.com/someone/watchlist/")

        with pytest.raises(SettingsError, match="RADARR_API_URL, RADARR_API_KEY, RADARR_QUALITY_PROFILE"):
            settings.require_run()

    def test_sync_preferences(self):
        settings = Settings(
            quality_profile="HD-1080p",
            root_folder_id=2,
            tags=["watchlist"],
            add_unmonitored=True,
            dry_run=True,
        )

        preferences = settings.sync_preferences()

        assert preferences.quality_profile_name == "HD-1080p"
        assert preferences.root_folder_id == 2
        assert preferences.tag_names == ["watchlist"]
        assert not preferences.monitored
        assert preferences.dry_run


class TestLoadSettings:
    def test_environment(self, monkeypatch):
        monkeypatch.setenv("LETTERBOXD_URL", "https://letterboxd.com/someone/watchlist/")
        monkeypatch.setenv("LETTERBOXD_TAKE_AMOUNT", "20")
        monkeypatch.setenv("LETTERBOXD_TAKE_STRATEGY", "oldest")
        monkeypatch.setenv("RADARR_TAGS", "watchlist, kids ,")
        monkeypatch.setenv("RADARR_ROOT_FOLDER_ID", "2")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DATA_DIR", "/tmp/lettarrboxd")

        settings = load_settings(load_env=False).settings

        assert settings.take_amount == 20
        assert settings.take_strategy is TakeStrategy.OLDEST
        assert settings.tags == ["watchlist", "kids"]
        assert settings.root_folder_id == 2
        assert settings.logging_level == logging.DEBUG
        assert settings.snapshot_path == Path("/tmp/lettarrboxd/movies.json")

    @pytest.mark.parametrize(("raw", "expected"), [("true", True), ("TRUE", True), ("1", False), ("yes", False)])
    def test_only_true_enables_flags(self, monkeypatch, raw, expected):
        monkeypatch.setenv("DRY_RUN", raw)
        monkeypatch.setenv("RADARR_ADD_UNMONITORED", raw)

        settings = load_settings(load_env=False).settings

        assert settings.dry_run is expected
        assert settings.add_unmonitored is expected

    def test_empty_values_count_as_unset(self, monkeypatch):
        monkeypatch.setenv("LETTERBOXD_TAKE_AMOUNT", "")
        monkeypatch.setenv("LETTERBOXD_TAKE_STRATEGY", "")
        monkeypatch.setenv("CHECK_INTERVAL_MINUTES", " ")

        settings = load_settings(load_env=False).settings

        assert settings.take_amount is None
        assert settings.check_interval_minutes == 10

    def test_invalid_environment_raises_settings_error(self, monkeypatch):
        monkeypatch.setenv("CHECK_INTERVAL_MINUTES", "1")

        with pytest.raises(SettingsError):
            load_settings(load_env=False)

    def test_toml_file(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            """
[letterboxd]
url = "https://letterboxd.com/someone/list/favorites/"
take_amount = 10
take_strategy = "newest"

[radarr]
api_url = "http://radarr:7878"
api_key = "secret"
quality_profile = "HD-1080p"
tags = ["letterboxd-favorites"]

[scheduler]
check_interval_minutes = 30
data_dir = "/srv/lettarrboxd"

[logging]
level = "warn"
"""
        )

        result = load_settings(config_file, load_env=False)

        settings = result.settings
        assert result.source_path == config_file
        assert settings.letterboxd_url == "https://letterboxd.com/someone/list/favorites/"
        assert settings.take_amount == 10
        assert settings.radarr_api_key == "secret"
        assert settings.tags == ["letterboxd-favorites"]
        assert settings.check_interval_minutes == 30
        assert settings.data_dir == Path("/srv/lettarrboxd")
        assert settings.logging_level == logging.WARNING

    def test_environment_overrides_toml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[radarr]\nquality_profile = "SD"\n')
        monkeypatch.setenv("RADARR_QUALITY_PROFILE", "Ultra-HD")
        monkeypatch.setenv("LETTARRBOXD_CONFIG", str(config_file))

        settings = load_settings(load_env=False).settings

        assert settings.quality_profile == "Ultra-HD"

    def test_invalid_toml(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("[radarr\n")

        with pytest.raises(SettingsError, match="Invalid TOML"):
            load_settings(config_file, load_env=False)
