"""Application services."""

from odpt_departures.application.services.departure_aggregator import aggregate
from odpt_departures.application.services.departure_service import (
    DepartureQueryService,
    OccupancySampleStats,
)
from odpt_departures.application.services.pattern_matcher import PatternMatcher
from odpt_departures.application.services.realtime_overlay import (
    RealtimeOverlay,
    build_realtime_index,
)
from odpt_departures.application.services.stop_resolver import StopResolver
from odpt_departures.application.services.timetable_projector import TimetableProjector

__all__ = [
    "DepartureQueryService",
    "OccupancySampleStats",
    "PatternMatcher",
    "RealtimeOverlay",
    "StopResolver",
    "TimetableProjector",
    "aggregate",
    "build_realtime_index",
]
