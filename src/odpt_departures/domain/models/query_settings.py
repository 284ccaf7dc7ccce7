"""Query settings domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QuerySettings:
    """Tunables for stop resolution and departure assembly."""

    timezone: str = "Asia/Tokyo"  # Operator local timezone, defines the service day
    station_suffixes: tuple[str, ...] = ("駅前", "駅")  # "station front", "station"
    last_run_markers: tuple[str, ...] = ("終",)  # Status text marking the last run of the day
    occupancy_match_window_minutes: int = 10
    dedupe_window_minutes: int = 3
    max_departures_per_route: int = 2
    timetable_concurrency: int = 4
    roster_fallback_limit: int = 50  # Max poles taken from the roster when title search finds none
    default_suggestion_limit: int = 20
    max_suggestion_limit: int = 50
