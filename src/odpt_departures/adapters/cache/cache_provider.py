"""Bundle of the TTL caches used by the departure query pipeline."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from odpt_departures.adapters.cache.ttl_cache import TtlCache
from odpt_departures.domain.contracts.cache_provider import CacheProviderProtocol

if TYPE_CHECKING:
    from odpt_departures.adapters.config.app_config import AppConfig
    from odpt_departures.domain.models.departure import Departure
    from odpt_departures.domain.models.realtime_index import RealtimeIndex
    from odpt_departures.domain.models.route_pattern import RoutePattern
    from odpt_departures.domain.models.stop_pole import StopPole

# Key of single-entry stores
ALL = "all"


@dataclass
class CacheProvider(CacheProviderProtocol):
    """Independent TTL stores, one per kind of upstream data."""

    stop_list: TtlCache[list[StopPole]]
    stop_resolution: TtlCache[list[StopPole]]
    route_patterns: TtlCache[list[RoutePattern]]
    realtime_index: TtlCache[RealtimeIndex]
    query_response: TtlCache[list[Departure]]

    @classmethod
    def create(
        cls,
        stop_list_ttl_seconds: float = 600,
        stop_resolution_ttl_seconds: float = 600,
        route_pattern_ttl_seconds: float = 600,
        realtime_index_ttl_seconds: float = 30,
        query_response_ttl_seconds: float = 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> CacheProvider:
        """Create the stores with the given lifetimes."""
        return cls(
            stop_list=TtlCache("stop_list", stop_list_ttl_seconds, clock),
            stop_resolution=TtlCache("stop_resolution", stop_resolution_ttl_seconds, clock),
            route_patterns=TtlCache("route_patterns", route_pattern_ttl_seconds, clock),
            realtime_index=TtlCache("realtime_index", realtime_index_ttl_seconds, clock),
            query_response=TtlCache("query_response", query_response_ttl_seconds, clock),
        )

    @classmethod
    def from_config(cls, config: AppConfig) -> CacheProvider:
        """Create the stores with lifetimes from application configuration."""
        return cls.create(
            stop_list_ttl_seconds=config.stop_list_ttl_seconds,
            stop_resolution_ttl_seconds=config.stop_resolution_ttl_seconds,
            route_pattern_ttl_seconds=config.route_pattern_ttl_seconds,
            realtime_index_ttl_seconds=config.realtime_index_ttl_seconds,
            query_response_ttl_seconds=config.query_response_ttl_seconds,
        )

    def invalidate_all(self) -> None:
        """Drop every entry of every store."""
        for store in (
            self.stop_list,
            self.stop_resolution,
            self.route_patterns,
            self.realtime_index,
            self.query_response,
        ):
            store.invalidate()
