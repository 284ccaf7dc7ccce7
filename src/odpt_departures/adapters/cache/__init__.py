"""Cache adapters."""

from odpt_departures.adapters.cache.cache_provider import ALL, CacheProvider
from odpt_departures.adapters.cache.ttl_cache import TtlCache

__all__ = ["ALL", "CacheProvider", "TtlCache"]
