"""ODPT API adapters."""

from odpt_departures.adapters.odpt_api.http_client import OdptHttpClient
from odpt_departures.adapters.odpt_api.odpt_route_pattern_repository import (
    OdptRoutePatternRepository,
)
from odpt_departures.adapters.odpt_api.odpt_stop_repository import OdptStopRepository
from odpt_departures.adapters.odpt_api.odpt_timetable_repository import OdptTimetableRepository
from odpt_departures.adapters.odpt_api.odpt_vehicle_feed_repository import (
    OdptVehicleFeedRepository,
)

__all__ = [
    "OdptHttpClient",
    "OdptRoutePatternRepository",
    "OdptStopRepository",
    "OdptTimetableRepository",
    "OdptVehicleFeedRepository",
]
