"""Stop pole repository port."""

from typing import Protocol

from odpt_departures.domain.models.stop_pole import StopPole


class StopRepository(Protocol):
    """Port for retrieving stop poles."""

    async def search_by_title(self, title: str) -> list[StopPole]:
        """Find poles whose title matches the given text upstream."""
        ...

    async def list_all(self) -> list[StopPole]:
        """Return the operator's full stop pole roster."""
        ...
