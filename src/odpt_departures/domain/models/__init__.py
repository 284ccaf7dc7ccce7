"""Domain models for ODPT bus departures."""

from odpt_departures.domain.models.departure import Departure
from odpt_departures.domain.models.error_details import ErrorDetails
from odpt_departures.domain.models.query_settings import QuerySettings
from odpt_departures.domain.models.realtime_index import RealtimeIndex, TurnaroundObservation
from odpt_departures.domain.models.route_pattern import (
    CandidatePattern,
    RoutePattern,
    StopReference,
)
from odpt_departures.domain.models.stop_pole import StopPole
from odpt_departures.domain.models.timetable import StopVisit, TimetableEntry
from odpt_departures.domain.models.vehicle_sample import (
    OccupancyLevel,
    OccupancySample,
    VehicleSample,
)

__all__ = [
    "CandidatePattern",
    "Departure",
    "ErrorDetails",
    "OccupancyLevel",
    "OccupancySample",
    "QuerySettings",
    "RealtimeIndex",
    "RoutePattern",
    "StopPole",
    "StopReference",
    "StopVisit",
    "TimetableEntry",
    "TurnaroundObservation",
    "VehicleSample",
]
