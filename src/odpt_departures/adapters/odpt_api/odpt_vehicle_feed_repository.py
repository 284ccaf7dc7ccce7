"""ODPT live bus feed repository adapter."""

import logging
from zoneinfo import ZoneInfo

from odpt_departures.adapters.odpt_api.constants import (
    DEFAULT_OPERATOR,
    PARAM_OPERATOR,
    RESOURCE_BUS,
)
from odpt_departures.adapters.odpt_api.parsers import OdptParser
from odpt_departures.domain.models.vehicle_sample import VehicleSample
from odpt_departures.domain.ports.transit_data_gateway import TransitDataGateway
from odpt_departures.domain.ports.vehicle_feed_repository import VehicleFeedRepository

logger = logging.getLogger(__name__)


class OdptVehicleFeedRepository(VehicleFeedRepository):
    """Adapter for odpt:Bus, the live vehicle position feed."""

    def __init__(
        self,
        gateway: TransitDataGateway,
        operator: str = DEFAULT_OPERATOR,
        timezone: str = "Asia/Tokyo",
    ) -> None:
        """Initialize with the gateway, operator and the timezone of naive timestamps."""
        self._gateway = gateway
        self._operator = operator
        self._timezone = ZoneInfo(timezone)

    async def get_samples(self) -> list[VehicleSample]:
        """Return one sample per vehicle that reports a route or pattern."""
        records = await self._gateway.fetch_collection(
            RESOURCE_BUS, {PARAM_OPERATOR: self._operator}
        )
        samples = []
        for record in records:
            sample = OdptParser.parse_vehicle(record, self._timezone)
            if sample:
                samples.append(sample)
        logger.debug(f"Parsed {len(samples)} of {len(records)} vehicle records")
        return samples
