"""Departure query service: the two entry points of the departures core."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from odpt_departures.application.services.departure_aggregator import aggregate
from odpt_departures.application.services.pattern_matcher import PatternMatcher
from odpt_departures.application.services.realtime_overlay import build_realtime_index
from odpt_departures.application.services.stop_resolver import (
    ROSTER_KEY,
    StopResolver,
    build_name_variants,
)
from odpt_departures.application.services.timetable_projector import (
    StopQuery,
    TimetableProjector,
)
from odpt_departures.domain.contracts.cache_provider import CacheProviderProtocol
from odpt_departures.domain.errors import (
    FetchFailedError,
    MissingCredentialError,
    TransitDataError,
)
from odpt_departures.domain.models.departure import Departure
from odpt_departures.domain.models.query_settings import QuerySettings
from odpt_departures.domain.models.realtime_index import RealtimeIndex
from odpt_departures.domain.models.route_pattern import RoutePattern
from odpt_departures.domain.ports.route_pattern_repository import RoutePatternRepository
from odpt_departures.domain.ports.stop_repository import StopRepository
from odpt_departures.domain.ports.timetable_repository import TimetableRepository
from odpt_departures.domain.ports.transit_data_gateway import TransitDataGateway
from odpt_departures.domain.ports.vehicle_feed_repository import VehicleFeedRepository
from odpt_departures.domain.stop_names import collapse_whitespace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OccupancySampleStats:
    """How many occupancy samples the live feed holds for given routes and patterns."""

    route_counts: dict[str, int] = field(default_factory=dict)
    pattern_counts: dict[str, int] = field(default_factory=dict)
    total_samples: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "routeCounts": dict(self.route_counts),
            "patternCounts": dict(self.pattern_counts),
            "totalSamples": self.total_samples,
        }


class DepartureQueryService:
    """Answers stop suggestions and next-departure queries for an origin/destination pair."""

    def __init__(
        self,
        gateway: TransitDataGateway,
        stop_repository: StopRepository,
        route_pattern_repository: RoutePatternRepository,
        timetable_repository: TimetableRepository,
        vehicle_feed_repository: VehicleFeedRepository,
        caches: CacheProviderProtocol,
        settings: QuerySettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize with the gateway, the repositories and the shared caches.

        The clock returns the current time; it defaults to the wall clock in
        the operator timezone.
        """
        self._gateway = gateway
        self._route_pattern_repository = route_pattern_repository
        self._vehicle_feed_repository = vehicle_feed_repository
        self._caches = caches
        self._settings = settings or QuerySettings()
        self._timezone = ZoneInfo(self._settings.timezone)
        self._clock = clock or (lambda: datetime.now(self._timezone))
        self._resolver = StopResolver(stop_repository, caches, self._settings)
        self._matcher = PatternMatcher()
        self._projector = TimetableProjector(timetable_repository, self._settings)

    async def suggest_stops(
        self, query: str, anchor: str | None = None, limit: int | None = None
    ) -> list[str]:
        """Suggest stop titles for a partial name; empty without an API token."""
        if not self._gateway.has_credential:
            logger.warning("ODPT token is not configured, returning no suggestions")
            return []
        return await self._resolver.suggest(query, anchor=anchor, limit=limit)

    async def next_departures(self, origin: str, dest: str) -> list[Departure]:
        """Ranked upcoming departures from origin towards dest.

        Raises:
            MissingCredentialError: No API token is configured.
            FetchFailedError: The stop or route pattern roster could not be fetched.
        """
        if not self._gateway.has_credential:
            raise MissingCredentialError("ODPT token is not configured")

        origin_name = collapse_whitespace(origin)
        dest_name = collapse_whitespace(dest)
        key = f"{origin_name}__{dest_name}"
        departures = await self._caches.query_response.get_or_build(
            key, lambda: self._assemble(origin_name, dest_name)
        )
        return list(departures)

    async def next_departures_safe(self, origin: str, dest: str) -> list[Departure]:
        """Like next_departures, but any failure is logged and yields an empty list."""
        try:
            return await self.next_departures(origin, dest)
        except TransitDataError as e:
            logger.error(f"Departures query {origin!r} -> {dest!r} failed: {e}")
            return []
        except Exception:
            logger.exception(f"Unexpected error in departures query {origin!r} -> {dest!r}")
            return []

    async def get_occupancy_sample_stats(
        self, route_ids: list[str], pattern_ids: list[str]
    ) -> OccupancySampleStats:
        """Occupancy sample counts per requested route and pattern id."""
        index = await self._get_realtime_index()
        return OccupancySampleStats(
            route_counts={
                rid: len(index.samples_by_key.get(rid, ()))
                for rid in dict.fromkeys(route_ids)
                if rid
            },
            pattern_counts={
                pid: len(index.samples_by_key.get(pid, ()))
                for pid in dict.fromkeys(pattern_ids)
                if pid
            },
            total_samples=sum(len(samples) for samples in index.samples_by_key.values()),
        )

    async def _get_route_patterns(self) -> list[RoutePattern]:
        return await self._caches.route_patterns.get_or_build(
            ROSTER_KEY, self._route_pattern_repository.list_all
        )

    async def _build_realtime_index(self) -> RealtimeIndex:
        samples = await self._vehicle_feed_repository.get_samples()
        return build_realtime_index(samples)

    async def _get_realtime_index(self) -> RealtimeIndex:
        """The live vehicle index; a feed failure degrades to an empty, uncached index."""
        try:
            return await self._caches.realtime_index.get_or_build(
                ROSTER_KEY, self._build_realtime_index
            )
        except FetchFailedError as e:
            logger.warning(f"Live vehicle feed unavailable, departures stay unadjusted: {e}")
            return RealtimeIndex()

    async def _assemble(self, origin: str, dest: str) -> list[Departure]:
        origin_poles, dest_poles = await asyncio.gather(
            self._resolver.resolve(origin), self._resolver.resolve(dest)
        )
        if not origin_poles or not dest_poles:
            logger.info(
                f"No stops resolved for {origin!r} ({len(origin_poles)}) "
                f"or {dest!r} ({len(dest_poles)})"
            )
            return []

        query = StopQuery(
            origin_name=origin,
            destination_name=dest,
            origin_poles=origin_poles,
            origin_names=build_name_variants(origin, origin_poles),
            destination_ids={pole.id for pole in dest_poles},
            destination_names=build_name_variants(dest, dest_poles),
        )

        patterns, index = await asyncio.gather(
            self._get_route_patterns(), self._get_realtime_index()
        )
        candidates = self._matcher.match(
            patterns,
            query.origin_ids,
            query.origin_names,
            query.destination_ids,
            query.destination_names,
        )
        if not candidates:
            logger.info(f"No route pattern serves {origin!r} before {dest!r}")
            return []

        now = self._clock()
        projection = await self._projector.project(candidates, query, index, now)
        departures = aggregate(projection.departures, now, self._settings)
        logger.info(
            f"Found {len(departures)} departures {origin!r} -> {dest!r} "
            f"from {len(candidates)} patterns"
        )
        return departures
