"""Timetable domain models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StopVisit:
    """A scheduled visit of a timetabled trip to one stop pole."""

    stop_id: str
    note: str
    arrival_time: str = ""
    departure_time: str = ""
    is_midnight: bool = False  # Service runs past local midnight

    @property
    def scheduled_time(self) -> str:
        """Time-of-day string used for boarding (departure, else arrival)."""
        return self.departure_time or self.arrival_time


@dataclass(frozen=True)
class TimetableEntry:
    """One timetabled trip along a route pattern."""

    id: str
    pattern_id: str
    route_id: str
    title: str
    visits: tuple[StopVisit, ...] = field(default_factory=tuple)
    status_text: str = ""
