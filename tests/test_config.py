"""Tests for configuration adapter."""

from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest

from odpt_departures.adapters.config import AppConfig


def write_toml(content: str) -> str:
    with NamedTemporaryFile(mode="w", suffix=".toml", delete=False, encoding="utf-8") as f:
        f.write(content)
        return f.name


def test_config_loads_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given no environment variables, when loading config, then defaults are used."""
    monkeypatch.delenv("ODPT_TOKEN", raising=False)

    config = AppConfig.for_testing()

    assert config.odpt_token == ""
    assert config.odpt_base_url == "https://api.odpt.org/api/v4"
    assert config.odpt_operator == "odpt.Operator:Toei"
    assert config.max_retries == 4
    assert config.stop_list_ttl_seconds == 600
    assert config.realtime_index_ttl_seconds == 30
    assert config.timezone == "Asia/Tokyo"
    assert config.station_suffixes == ["駅前", "駅"]


def test_config_loads_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given environment variables, when loading config, then they are used."""
    monkeypatch.setenv("ODPT_TOKEN", "abc")
    monkeypatch.setenv("PAGE_SIZE", "500")
    monkeypatch.setenv("TIMETABLE_CONCURRENCY", "2")

    config = AppConfig.for_testing()

    assert config.odpt_token == "abc"
    assert config.page_size == 500
    assert config.timetable_concurrency == 2


def test_config_validates_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given an unknown timezone, when loading config, then validation error is raised."""
    monkeypatch.setenv("TIMEZONE", "Mars/Olympus")

    with pytest.raises(ValueError, match="valid IANA timezone"):
        AppConfig.for_testing()


def test_config_validates_positive_limits() -> None:
    """Given a zero page size, when loading config, then validation error is raised."""
    with pytest.raises(ValueError, match="positive integer"):
        AppConfig.for_testing(page_size=0)
    with pytest.raises(ValueError, match="must not be negative"):
        AppConfig.for_testing(max_retries=-1)
    with pytest.raises(ValueError, match="must not be negative"):
        AppConfig.for_testing(dedupe_window_minutes=-1)
    assert AppConfig.for_testing(dedupe_window_minutes=0).dedupe_window_minutes == 0


def test_config_applies_toml_overrides() -> None:
    """Given a TOML file with known tables, when applied, then the fields change."""
    temp_path = write_toml(
        """
[odpt]
sleep_ms_between_calls = 250
odpt_operator = "odpt.Operator:Keio"

[cache]
query_response_ttl_seconds = 5

[query]
max_departures_per_route = 3
last_run_markers = ["終", "last"]
"""
    )
    try:
        config = AppConfig.for_testing(config_file=temp_path)
        config.apply_config_file()
    finally:
        Path(temp_path).unlink()

    assert config.sleep_ms_between_calls == 250
    assert config.odpt_operator == "odpt.Operator:Keio"
    assert config.query_response_ttl_seconds == 5
    settings = config.to_query_settings()
    assert settings.max_departures_per_route == 3
    assert settings.last_run_markers == ("終", "last")


def test_config_toml_values_are_validated() -> None:
    """Given an invalid value in TOML, when applied, then validation error is raised."""
    temp_path = write_toml("[query]\ntimetable_concurrency = 0\n")
    try:
        config = AppConfig.for_testing(config_file=temp_path)
        with pytest.raises(ValueError):
            config.apply_config_file()
    finally:
        Path(temp_path).unlink()


def test_config_ignores_unknown_toml_keys(caplog: pytest.LogCaptureFixture) -> None:
    """Given an unknown key, when applied, then it is skipped with a warning."""
    temp_path = write_toml("[odpt]\nodpt_token = \"leak\"\n")
    try:
        config = AppConfig.for_testing(config_file=temp_path, odpt_token="")
        config.apply_config_file()
    finally:
        Path(temp_path).unlink()

    assert config.odpt_token == ""
    assert "Ignoring unknown setting 'odpt_token'" in caplog.text


def test_config_raises_error_when_file_not_found() -> None:
    """Given non-existent config file, when applied, then FileNotFoundError is raised."""
    config = AppConfig.for_testing(config_file="nonexistent.toml")

    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        config.apply_config_file()


def test_config_raises_error_when_config_file_not_set() -> None:
    """Given config_file is None, when applied, then ValueError is raised."""
    config = AppConfig.for_testing(config_file=None)

    with pytest.raises(ValueError, match="config_file must be set"):
        config.apply_config_file()
