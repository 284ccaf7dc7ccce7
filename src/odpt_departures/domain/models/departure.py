"""Departure domain model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from odpt_departures.domain.models.vehicle_sample import OccupancyLevel


@dataclass(frozen=True)
class Departure:
    """A ranked upcoming departure from the origin towards the destination."""

    id: str
    route_name: str
    route_id: str
    pattern_id: str
    origin_stop_name: str
    origin_pole_name: str
    dest_stop_name: str  # Empty when the route name already names the destination
    scheduled_time: str
    scheduled_at: datetime
    delay_minutes: int
    departure_time: str
    departure_at: datetime
    eta_minutes: int
    occupancy: str | None = None
    occupancy_ratio: int | None = None
    occupancy_level: OccupancyLevel = OccupancyLevel.UNKNOWN
    is_last: bool = False

    @property
    def scheduled_epoch(self) -> int:
        """Scheduled time as Unix seconds."""
        return int(self.scheduled_at.timestamp())

    @property
    def departure_epoch(self) -> int:
        """Adjusted departure time as Unix seconds."""
        return int(self.departure_at.timestamp())

    @property
    def display_name(self) -> str:
        """Route name, followed by the destination when it is not already part of it."""
        route = self.route_name.strip()
        dest = self.dest_stop_name.strip()
        if not dest:
            return route
        if not route:
            return dest
        return f"{route} ({dest})"

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        return {
            "id": self.id,
            "routeName": self.route_name,
            "routeId": self.route_id or None,
            "patternId": self.pattern_id or None,
            "originStopName": self.origin_stop_name,
            "originPoleName": self.origin_pole_name,
            "destStopName": self.dest_stop_name,
            "scheduledTime": self.scheduled_time,
            "scheduledEpoch": self.scheduled_epoch,
            "delayMinutes": self.delay_minutes,
            "departureTime": self.departure_time,
            "departureEpoch": self.departure_epoch,
            "etaMinutes": self.eta_minutes,
            "occupancy": self.occupancy,
            "occupancyLevel": self.occupancy_level.value,
            "occupancyRatio": self.occupancy_ratio,
            "isLast": self.is_last,
        }
