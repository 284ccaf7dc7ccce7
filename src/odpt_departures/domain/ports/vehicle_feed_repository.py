"""Vehicle feed repository port."""

from typing import Protocol

from odpt_departures.domain.models.vehicle_sample import VehicleSample


class VehicleFeedRepository(Protocol):
    """Port for reading the live vehicle feed snapshot."""

    async def get_samples(self) -> list[VehicleSample]:
        """Return one sample per vehicle record in the current snapshot."""
        ...
