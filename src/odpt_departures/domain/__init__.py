"""Domain layer - core business logic and models."""

from odpt_departures.domain.errors import (
    FetchFailedError,
    MissingCredentialError,
    TransitDataError,
)
from odpt_departures.domain.models import (
    Departure,
    OccupancyLevel,
    QuerySettings,
    StopPole,
)
from odpt_departures.domain.ports import (
    RoutePatternRepository,
    StopRepository,
    TimetableRepository,
    TransitDataGateway,
    VehicleFeedRepository,
)

__all__ = [
    "Departure",
    "FetchFailedError",
    "MissingCredentialError",
    "OccupancyLevel",
    "QuerySettings",
    "RoutePatternRepository",
    "StopPole",
    "StopRepository",
    "TimetableRepository",
    "TransitDataError",
    "TransitDataGateway",
    "VehicleFeedRepository",
]
