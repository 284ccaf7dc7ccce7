"""ODPT stop pole repository adapter."""

import logging

from odpt_departures.adapters.odpt_api.constants import (
    DEFAULT_OPERATOR,
    PARAM_OPERATOR,
    PARAM_TITLE,
    RESOURCE_STOP_POLE,
)
from odpt_departures.adapters.odpt_api.parsers import OdptParser
from odpt_departures.domain.models.stop_pole import StopPole
from odpt_departures.domain.ports.stop_repository import StopRepository
from odpt_departures.domain.ports.transit_data_gateway import TransitDataGateway

logger = logging.getLogger(__name__)


class OdptStopRepository(StopRepository):
    """Adapter for odpt:BusstopPole."""

    def __init__(self, gateway: TransitDataGateway, operator: str = DEFAULT_OPERATOR) -> None:
        """Initialize with the gateway and the operator whose poles are served."""
        self._gateway = gateway
        self._operator = operator

    async def _fetch(self, filters: dict[str, str]) -> list[StopPole]:
        records = await self._gateway.fetch_collection(
            RESOURCE_STOP_POLE, {PARAM_OPERATOR: self._operator, **filters}
        )
        poles = [pole for pole in map(OdptParser.parse_stop_pole, records) if pole]
        if len(poles) < len(records):
            dropped = len(records) - len(poles)
            logger.debug(f"Dropped {dropped} stop pole records without id or title")
        return poles

    async def search_by_title(self, title: str) -> list[StopPole]:
        """Find poles by upstream title search."""
        return await self._fetch({PARAM_TITLE: title})

    async def list_all(self) -> list[StopPole]:
        """Return every pole of the operator."""
        poles = await self._fetch({})
        logger.info(f"Loaded {len(poles)} stop poles for {self._operator}")
        return poles
