"""Adapters layer - external system integrations."""

from odpt_departures.adapters.cache import CacheProvider, TtlCache
from odpt_departures.adapters.config import AppConfig
from odpt_departures.adapters.odpt_api import (
    OdptHttpClient,
    OdptRoutePatternRepository,
    OdptStopRepository,
    OdptTimetableRepository,
    OdptVehicleFeedRepository,
)
from odpt_departures.adapters.request_throttle import RequestThrottle

__all__ = [
    "AppConfig",
    "CacheProvider",
    "OdptHttpClient",
    "OdptRoutePatternRepository",
    "OdptStopRepository",
    "OdptTimetableRepository",
    "OdptVehicleFeedRepository",
    "RequestThrottle",
    "TtlCache",
]
