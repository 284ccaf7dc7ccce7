"""Realtime snapshot index domain model."""

from dataclasses import dataclass, field
from datetime import datetime

from odpt_departures.domain.models.vehicle_sample import OccupancySample


@dataclass(frozen=True)
class TurnaroundObservation:
    """Predicted arrival of a vehicle at the end of its current leg."""

    predicted_arrival: datetime
    observed_at: datetime | None


@dataclass(frozen=True)
class RealtimeIndex:
    """Delay, occupancy and turnaround tables derived from one feed snapshot."""

    delay_by_key: dict[str, int] = field(default_factory=dict)
    samples_by_key: dict[str, tuple[OccupancySample, ...]] = field(default_factory=dict)
    turnaround_by_key: dict[tuple[str, str], TurnaroundObservation] = field(
        default_factory=dict
    )
    vehicle_count: int = 0

    def delay_for(self, route_id: str, pattern_id: str) -> int:
        """Delay in seconds for a route, falling back to its pattern."""
        return (
            (route_id and self.delay_by_key.get(route_id))
            or self.delay_by_key.get(pattern_id)
            or 0
        )

    def samples_for(self, route_id: str, pattern_id: str) -> tuple[OccupancySample, ...]:
        """Occupancy samples for a route, falling back to its pattern."""
        return (
            (route_id and self.samples_by_key.get(route_id))
            or self.samples_by_key.get(pattern_id)
            or ()
        )

    def turnaround_for(self, key: str, normalized_stop: str) -> TurnaroundObservation | None:
        """Latest turnaround observation for a route key and normalized stop name."""
        return self.turnaround_by_key.get((key, normalized_stop))
