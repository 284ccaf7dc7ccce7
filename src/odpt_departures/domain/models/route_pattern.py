"""Route pattern domain models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StopReference:
    """One stop in a pattern's ordered stop sequence."""

    stop_id: str
    note: str
    index: int


@dataclass(frozen=True)
class RoutePattern:
    """One directional stop-sequence variant of a bus route."""

    id: str
    route_id: str
    title: str
    stops: tuple[StopReference, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CandidatePattern:
    """A route pattern on which the origin stop precedes the destination stop."""

    pattern_id: str
    route_id: str
    title: str
    origin_index: int
    destination_index: int
