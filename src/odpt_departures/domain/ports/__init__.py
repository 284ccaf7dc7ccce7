"""Ports (interfaces) for the ports-and-adapters architecture."""

from odpt_departures.domain.ports.route_pattern_repository import RoutePatternRepository
from odpt_departures.domain.ports.stop_repository import StopRepository
from odpt_departures.domain.ports.timetable_repository import TimetableRepository
from odpt_departures.domain.ports.transit_data_gateway import TransitDataGateway
from odpt_departures.domain.ports.vehicle_feed_repository import VehicleFeedRepository

__all__ = [
    "RoutePatternRepository",
    "StopRepository",
    "TimetableRepository",
    "TransitDataGateway",
    "VehicleFeedRepository",
]
