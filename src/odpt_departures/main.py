"""Composition root wiring the ODPT adapters into the departure query service."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from odpt_departures.adapters.cache import CacheProvider
from odpt_departures.adapters.config import AppConfig
from odpt_departures.adapters.odpt_api import (
    OdptHttpClient,
    OdptRoutePatternRepository,
    OdptStopRepository,
    OdptTimetableRepository,
    OdptVehicleFeedRepository,
)
from odpt_departures.adapters.request_throttle import RequestThrottle
from odpt_departures.application.services import DepartureQueryService

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Log to stderr, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def create_departure_service(
    config: AppConfig, session: aiohttp.ClientSession | None
) -> DepartureQueryService:
    """Wire the gateway, repositories and caches described by config."""
    throttle = RequestThrottle("odpt", config.sleep_ms_between_calls / 1000)
    gateway = OdptHttpClient(
        session,
        token=config.odpt_token,
        base_url=config.odpt_base_url,
        page_size=config.page_size,
        max_retries=config.max_retries,
        retry_base_delay_ms=config.retry_base_delay_ms,
        retry_increment_ms=config.retry_increment_ms,
        timeout_seconds=config.odpt_api_timeout,
        throttle=throttle,
    )
    operator = config.odpt_operator
    return DepartureQueryService(
        gateway=gateway,
        stop_repository=OdptStopRepository(gateway, operator),
        route_pattern_repository=OdptRoutePatternRepository(gateway, operator),
        timetable_repository=OdptTimetableRepository(gateway),
        vehicle_feed_repository=OdptVehicleFeedRepository(gateway, operator, config.timezone),
        caches=CacheProvider.from_config(config),
        settings=config.to_query_settings(),
    )


@asynccontextmanager
async def open_departure_service(
    config: AppConfig | None = None,
) -> AsyncIterator[DepartureQueryService]:
    """Yield a wired service whose HTTP session lives as long as the context."""
    if config is None:
        config = AppConfig()
        if config.config_file:
            config.apply_config_file()

    if not config.odpt_token:
        logger.warning("ODPT_TOKEN is not set; departures queries will fail")

    async with aiohttp.ClientSession() as session:
        yield create_departure_service(config, session)
