"""Domain contracts (protocols) implemented by adapters."""

from odpt_departures.domain.contracts.cache_provider import CacheProviderProtocol
from odpt_departures.domain.contracts.ttl_cache import TtlCacheProtocol

__all__ = ["CacheProviderProtocol", "TtlCacheProtocol"]
