"""Protocol for the bundle of caches the query pipeline reads through."""

from typing import TYPE_CHECKING, Protocol

from odpt_departures.domain.contracts.ttl_cache import TtlCacheProtocol

if TYPE_CHECKING:
    from odpt_departures.domain.models.departure import Departure
    from odpt_departures.domain.models.realtime_index import RealtimeIndex
    from odpt_departures.domain.models.route_pattern import RoutePattern
    from odpt_departures.domain.models.stop_pole import StopPole


class CacheProviderProtocol(Protocol):
    """Independent TTL stores, one per kind of upstream data."""

    stop_list: TtlCacheProtocol["list[StopPole]"]
    stop_resolution: TtlCacheProtocol["list[StopPole]"]
    route_patterns: TtlCacheProtocol["list[RoutePattern]"]
    realtime_index: TtlCacheProtocol["RealtimeIndex"]
    query_response: TtlCacheProtocol["list[Departure]"]

    def invalidate_all(self) -> None:
        """Drop every entry of every store."""
        ...
