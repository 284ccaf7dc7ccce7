"""Timetable repository port."""

from typing import Protocol

from odpt_departures.domain.models.timetable import TimetableEntry


class TimetableRepository(Protocol):
    """Port for retrieving scheduled timetables."""

    async def get_by_pattern(self, pattern_id: str) -> list[TimetableEntry]:
        """Timetables published for a route pattern."""
        ...

    async def get_by_route(self, route_id: str) -> list[TimetableEntry]:
        """Timetables published for a whole route."""
        ...
