"""ODPT bus timetable repository adapter."""

from odpt_departures.adapters.odpt_api.constants import (
    PARAM_PATTERN,
    PARAM_ROUTE,
    RESOURCE_TIMETABLE,
)
from odpt_departures.adapters.odpt_api.parsers import OdptParser
from odpt_departures.domain.models.timetable import TimetableEntry
from odpt_departures.domain.ports.timetable_repository import TimetableRepository
from odpt_departures.domain.ports.transit_data_gateway import TransitDataGateway


class OdptTimetableRepository(TimetableRepository):
    """Adapter for odpt:BusTimetable."""

    def __init__(self, gateway: TransitDataGateway) -> None:
        """Initialize with the gateway."""
        self._gateway = gateway

    async def get_by_pattern(self, pattern_id: str) -> list[TimetableEntry]:
        """Get the timetables published for one route pattern."""
        records = await self._gateway.fetch_collection(
            RESOURCE_TIMETABLE, {PARAM_PATTERN: pattern_id}
        )
        return [OdptParser.parse_timetable(r) for r in records]

    async def get_by_route(self, route_id: str) -> list[TimetableEntry]:
        """Get every timetable of a route, for operators that do not index by pattern."""
        records = await self._gateway.fetch_collection(RESOURCE_TIMETABLE, {PARAM_ROUTE: route_id})
        return [OdptParser.parse_timetable(r) for r in records]
