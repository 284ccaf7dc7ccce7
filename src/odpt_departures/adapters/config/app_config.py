"""12-factor configuration adapter using environment variables and TOML config."""

import logging
import tomllib
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from odpt_departures.domain.models.query_settings import QuerySettings

logger = logging.getLogger(__name__)

# TOML table -> fields it may override
TOML_SECTIONS: dict[str, tuple[str, ...]] = {
    "odpt": (
        "odpt_base_url",
        "odpt_operator",
        "odpt_api_timeout",
        "page_size",
        "max_retries",
        "retry_base_delay_ms",
        "retry_increment_ms",
        "sleep_ms_between_calls",
    ),
    "cache": (
        "stop_list_ttl_seconds",
        "stop_resolution_ttl_seconds",
        "route_pattern_ttl_seconds",
        "realtime_index_ttl_seconds",
        "query_response_ttl_seconds",
    ),
    "query": (
        "timezone",
        "occupancy_match_window_minutes",
        "dedupe_window_minutes",
        "max_departures_per_route",
        "timetable_concurrency",
        "station_suffixes",
        "last_run_markers",
    ),
}


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # ODPT API configuration
    odpt_token: str = Field(
        default="",
        description="ODPT consumer key (acl:consumerKey). Empty disables upstream access",
    )
    odpt_base_url: str = Field(
        default="https://api.odpt.org/api/v4", description="Root URL of the ODPT API"
    )
    odpt_operator: str = Field(
        default="odpt.Operator:Toei", description="Operator whose buses are served"
    )
    odpt_api_timeout: int = Field(default=10, description="Timeout for ODPT requests in seconds")
    page_size: int = Field(default=1000, description="Records requested per page ($top)")
    max_retries: int = Field(
        default=4, description="Retries after HTTP 429 before a fetch is reported as failed"
    )
    retry_base_delay_ms: int = Field(
        default=800, description="Back-off before the first retry after HTTP 429"
    )
    retry_increment_ms: int = Field(
        default=400, description="Back-off added for each further retry after HTTP 429"
    )
    sleep_ms_between_calls: int = Field(
        default=0,
        description="Minimum time in milliseconds between API calls to avoid rate limiting",
    )

    # Cache lifetimes
    stop_list_ttl_seconds: int = Field(default=600, description="Stop roster cache lifetime")
    stop_resolution_ttl_seconds: int = Field(
        default=600, description="Stop name resolution cache lifetime"
    )
    route_pattern_ttl_seconds: int = Field(default=600, description="Route pattern cache lifetime")
    realtime_index_ttl_seconds: int = Field(
        default=30, description="Live vehicle index cache lifetime"
    )
    query_response_ttl_seconds: int = Field(
        default=30, description="Assembled departures cache lifetime per origin/destination"
    )

    # Query behaviour
    timezone: str = Field(
        default="Asia/Tokyo",
        description="Operator timezone (IANA name); defines the service day",
    )
    occupancy_match_window_minutes: int = Field(
        default=10, description="Max distance between an occupancy sample and a departure"
    )
    dedupe_window_minutes: int = Field(
        default=3, description="Departures of one route closer than this are merged"
    )
    max_departures_per_route: int = Field(default=2, description="Departures kept per route")
    timetable_concurrency: int = Field(
        default=4, description="Concurrent timetable fetches per query"
    )
    station_suffixes: list[str] = Field(
        default_factory=lambda: ["駅前", "駅"],
        description="Station qualifiers tried with and without when resolving stop names",
    )
    last_run_markers: list[str] = Field(
        default_factory=lambda: ["終"],
        description="Timetable status text marking the last run of the day",
    )

    # TOML config file path (optional)
    config_file: str | None = Field(
        default=None,
        description="Path to TOML file with [odpt], [cache] and [query] overrides",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"timezone must be a valid IANA timezone name, got {v!r}") from e
        return v

    @field_validator(
        "page_size",
        "odpt_api_timeout",
        "max_departures_per_route",
        "timetable_concurrency",
        "occupancy_match_window_minutes",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate limits that must be at least one."""
        if v < 1:
            raise ValueError("value must be a positive integer")
        return v

    @field_validator(
        "max_retries",
        "retry_base_delay_ms",
        "retry_increment_ms",
        "sleep_ms_between_calls",
        "dedupe_window_minutes",
    )
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Validate delays and counts that may be zero."""
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Create a config that ignores .env files."""
        return cls(_env_file=None, **overrides)  # type: ignore[call-arg]

    def _load_toml_data(self) -> dict[str, Any]:
        """Load and parse the TOML file."""
        if not self.config_file:
            raise ValueError("config_file must be set to load TOML overrides")

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            return tomllib.load(f)

    def apply_config_file(self) -> None:
        """Override settings with the values named in the TOML file's tables.

        Unknown keys are ignored with a warning; values are validated like
        environment values.
        """
        toml_data = self._load_toml_data()
        for section, fields in TOML_SECTIONS.items():
            table = toml_data.get(section, {})
            if not isinstance(table, dict):
                raise ValueError(f"TOML config '{section}' must be a table")
            for key, value in table.items():
                if key not in fields:
                    logger.warning(f"Ignoring unknown setting '{key}' in [{section}]")
                    continue
                setattr(self, key, value)

    def to_query_settings(self) -> QuerySettings:
        """Query tunables for the application layer."""
        return QuerySettings(
            timezone=self.timezone,
            station_suffixes=tuple(self.station_suffixes),
            last_run_markers=tuple(self.last_run_markers),
            occupancy_match_window_minutes=self.occupancy_match_window_minutes,
            dedupe_window_minutes=self.dedupe_window_minutes,
            max_departures_per_route=self.max_departures_per_route,
            timetable_concurrency=self.timetable_concurrency,
        )
