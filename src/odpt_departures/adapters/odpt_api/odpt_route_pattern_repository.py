"""ODPT route pattern repository adapter."""

import logging

from odpt_departures.adapters.odpt_api.constants import (
    DEFAULT_OPERATOR,
    PARAM_OPERATOR,
    RESOURCE_ROUTE_PATTERN,
)
from odpt_departures.adapters.odpt_api.parsers import OdptParser
from odpt_departures.domain.models.route_pattern import RoutePattern
from odpt_departures.domain.ports.route_pattern_repository import RoutePatternRepository
from odpt_departures.domain.ports.transit_data_gateway import TransitDataGateway

logger = logging.getLogger(__name__)


class OdptRoutePatternRepository(RoutePatternRepository):
    """Adapter for odpt:BusroutePattern."""

    def __init__(self, gateway: TransitDataGateway, operator: str = DEFAULT_OPERATOR) -> None:
        """Initialize with the gateway and the operator whose patterns are served."""
        self._gateway = gateway
        self._operator = operator

    async def list_all(self) -> list[RoutePattern]:
        """Return every route pattern of the operator."""
        records = await self._gateway.fetch_collection(
            RESOURCE_ROUTE_PATTERN, {PARAM_OPERATOR: self._operator}
        )
        patterns = [p for p in map(OdptParser.parse_route_pattern, records) if p]
        logger.info(f"Loaded {len(patterns)} route patterns for {self._operator}")
        return patterns
