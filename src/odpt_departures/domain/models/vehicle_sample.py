"""Live vehicle feed domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class OccupancyLevel(str, Enum):
    """Bucketed occupancy of a bus."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VehicleSample:
    """One observation of one vehicle from the live feed."""

    route_id: str
    pattern_id: str
    observed_at: datetime | None
    occupancy_text: str | None
    occupancy_ratio: int | None
    delay_seconds: int
    destination_sign: str | None
    predicted_arrival: datetime | None

    @property
    def key(self) -> str:
        """Lookup key for delay and turnaround tables (route, else pattern)."""
        return self.route_id or self.pattern_id


@dataclass(frozen=True)
class OccupancySample:
    """A time-stamped occupancy reading for a route or pattern."""

    observed_at: datetime | None
    text: str | None
    ratio: int | None
