"""Timetable projection: scheduled stop visits to concrete upcoming departures."""

import asyncio
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from odpt_departures.application.services.departure_aggregator import build_route_key
from odpt_departures.application.services.pattern_matcher import find_stop_index
from odpt_departures.application.services.realtime_overlay import RealtimeOverlay
from odpt_departures.domain.errors import FetchFailedError
from odpt_departures.domain.models.departure import Departure
from odpt_departures.domain.models.error_details import ErrorDetails
from odpt_departures.domain.models.query_settings import QuerySettings
from odpt_departures.domain.models.realtime_index import RealtimeIndex
from odpt_departures.domain.models.route_pattern import CandidatePattern
from odpt_departures.domain.models.stop_pole import StopPole
from odpt_departures.domain.models.timetable import TimetableEntry
from odpt_departures.domain.ports.timetable_repository import TimetableRepository
from odpt_departures.domain.stop_names import normalize_stop_name

logger = logging.getLogger(__name__)

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})$")
HOURS_PER_DAY = 24


def project_scheduled_time(time_str: str, is_midnight: bool, now: datetime) -> datetime | None:
    """Project a timetable "HH:MM" onto the first matching instant not before now.

    The time is anchored to now's calendar day, moved a day ahead for
    after-midnight runs, and a further day ahead when already past. Hours of
    24 and above are read as after-midnight times.
    """
    match = _TIME_OF_DAY.match(time_str.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if minute > 59:
        return None
    if hour >= HOURS_PER_DAY:
        hour -= HOURS_PER_DAY
        is_midnight = True
    if hour >= HOURS_PER_DAY:
        return None

    projected = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if is_midnight:
        projected += timedelta(days=1)
    if projected < now:
        projected += timedelta(days=1)
    return projected


def round_minutes(delta: timedelta) -> int:
    """Whole minutes, halves rounded up, floored at zero."""
    return max(0, math.floor(delta.total_seconds() / 60 + 0.5))


def format_time(value: datetime) -> str:
    return value.strftime("%H:%M")


def has_last_run_marker(status_text: str, markers: tuple[str, ...]) -> bool:
    """Check whether timetable status text marks the last run of the day."""
    lowered = status_text.casefold()
    return any(marker.casefold() in lowered for marker in markers if marker)


@dataclass(frozen=True)
class ProjectedDeparture:
    """A departure plus what the aggregator needs to group and flag it."""

    departure: Departure
    route_key: str
    status_is_last: bool = False


@dataclass
class ProjectionResult:
    """Departures of all candidate patterns, with the patterns that failed."""

    departures: list[ProjectedDeparture] = field(default_factory=list)
    failed_patterns: dict[str, ErrorDetails] = field(default_factory=dict)


@dataclass(frozen=True)
class StopQuery:
    """The resolved origin and destination of a departures query."""

    origin_name: str
    destination_name: str
    origin_poles: list[StopPole]
    origin_names: list[str]
    destination_ids: set[str]
    destination_names: list[str]

    @property
    def origin_ids(self) -> set[str]:
        return {pole.id for pole in self.origin_poles}


class TimetableProjector:
    """Projects candidate patterns' timetables onto realtime-adjusted departures."""

    def __init__(self, timetable_repository: TimetableRepository, settings: QuerySettings) -> None:
        """Initialize with a timetable repository and query settings."""
        self._timetable_repository = timetable_repository
        self._settings = settings
        self._overlay = RealtimeOverlay(
            occupancy_match_window=timedelta(minutes=settings.occupancy_match_window_minutes)
        )

    async def _fetch_timetables(self, candidate: CandidatePattern) -> list[TimetableEntry]:
        """Timetables of a pattern, falling back to its route when none are indexed."""
        timetables = await self._timetable_repository.get_by_pattern(candidate.pattern_id)
        if not timetables and candidate.route_id:
            logger.debug(
                f"No timetables for pattern {candidate.pattern_id}, "
                f"retrying by route {candidate.route_id}"
            )
            timetables = await self._timetable_repository.get_by_route(candidate.route_id)
        return timetables

    async def project(
        self,
        candidates: list[CandidatePattern],
        query: StopQuery,
        index: RealtimeIndex,
        now: datetime,
    ) -> ProjectionResult:
        """Fetch every candidate's timetables concurrently and project them.

        A pattern whose fetch fails contributes no departures and does not abort
        the others; the failure is logged and listed in the result.
        """
        semaphore = asyncio.Semaphore(self._settings.timetable_concurrency)

        async def fetch_bounded(candidate: CandidatePattern) -> list[TimetableEntry]:
            async with semaphore:
                return await self._fetch_timetables(candidate)

        fetched = await asyncio.gather(
            *(fetch_bounded(c) for c in candidates), return_exceptions=True
        )

        result = ProjectionResult()
        for candidate, outcome in zip(candidates, fetched, strict=True):
            if isinstance(outcome, FetchFailedError):
                logger.warning(f"Skipping pattern {candidate.pattern_id}: {outcome}")
                result.failed_patterns[candidate.pattern_id] = outcome.details
                continue
            if isinstance(outcome, Exception):
                logger.error(
                    f"Skipping pattern {candidate.pattern_id} after unexpected error",
                    exc_info=outcome,
                )
                result.failed_patterns[candidate.pattern_id] = ErrorDetails(
                    reason=f"{type(outcome).__name__}: {outcome}"
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            for timetable in outcome:
                projected = self._project_timetable(candidate, timetable, query, index, now)
                if projected:
                    result.departures.append(projected)

        logger.debug(
            f"Projected {len(result.departures)} departures from {len(candidates)} patterns "
            f"({len(result.failed_patterns)} failed)"
        )
        return result

    def _project_timetable(
        self,
        candidate: CandidatePattern,
        timetable: TimetableEntry,
        query: StopQuery,
        index: RealtimeIndex,
        now: datetime,
    ) -> ProjectedDeparture | None:
        visits = timetable.visits
        origin_index = find_stop_index(visits, query.origin_ids, query.origin_names)
        destination_index = find_stop_index(visits, query.destination_ids, query.destination_names)
        if origin_index < 0 or destination_index < 0 or origin_index >= destination_index:
            return None

        visit = visits[origin_index]
        time_str = visit.scheduled_time
        if not time_str:
            return None
        scheduled_at = project_scheduled_time(time_str, visit.is_midnight, now)
        if scheduled_at is None:
            logger.debug(f"Skipping timetable {timetable.id}: unparseable time {time_str!r}")
            return None

        pattern_id = candidate.pattern_id
        route_id = candidate.route_id
        adjusted = self._overlay.adjust(
            index, scheduled_at, route_id, pattern_id, query.origin_name
        )
        departure_at = adjusted.departure_at
        occupancy = self._overlay.occupancy(index, departure_at, route_id, pattern_id)

        route_name = timetable.title or candidate.title or route_id or pattern_id
        route_key = build_route_key(route_name, route_id, pattern_id)
        destination = query.destination_name
        if normalize_stop_name(destination) in normalize_stop_name(route_name):
            destination = ""
        pole_titles = {pole.id: pole.title for pole in query.origin_poles}
        departure_time = format_time(departure_at)

        departure = Departure(
            id=f"{route_key}-{departure_time}",
            route_name=route_name,
            route_id=route_id,
            pattern_id=pattern_id,
            origin_stop_name=query.origin_name,
            origin_pole_name=pole_titles.get(visit.stop_id) or visit.note or query.origin_name,
            dest_stop_name=destination,
            scheduled_time=format_time(scheduled_at),
            scheduled_at=scheduled_at,
            delay_minutes=round_minutes(departure_at - scheduled_at),
            departure_time=departure_time,
            departure_at=departure_at,
            eta_minutes=round_minutes(departure_at - now),
            occupancy=occupancy.text,
            occupancy_ratio=occupancy.ratio,
            occupancy_level=occupancy.level,
        )
        return ProjectedDeparture(
            departure=departure,
            route_key=route_key,
            status_is_last=has_last_run_marker(
                timetable.status_text, self._settings.last_run_markers
            ),
        )
