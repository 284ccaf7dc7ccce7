"""Route pattern repository port."""

from typing import Protocol

from odpt_departures.domain.models.route_pattern import RoutePattern


class RoutePatternRepository(Protocol):
    """Port for retrieving route patterns."""

    async def list_all(self) -> list[RoutePattern]:
        """Return the operator's full route pattern roster."""
        ...
