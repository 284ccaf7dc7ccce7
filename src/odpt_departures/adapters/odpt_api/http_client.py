"""HTTP client for ODPT API requests.

The single place where the package talks to the network. Handles paging,
404-as-empty and bounded back-off on HTTP 429.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

import aiohttp

from odpt_departures.adapters.api_request_logger import log_api_request
from odpt_departures.adapters.odpt_api.constants import (
    DEFAULT_HEADERS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RETRY_BASE_DELAY_MS,
    DEFAULT_RETRY_INCREMENT_MS,
    ERROR_BODY_PREVIEW_CHARS,
    ODPT_BASE_URL,
    PARAM_CONSUMER_KEY,
    PARAM_SKIP,
    PARAM_TOP,
)
from odpt_departures.adapters.request_throttle import RequestThrottle
from odpt_departures.domain.errors import FetchFailedError, MissingCredentialError
from odpt_departures.domain.models.error_details import ErrorDetails

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientResponse, ClientSession

# Upper bound on pages per collection, in case upstream ignores $skip
MAX_PAGES = 200


class FetchStatus(str, Enum):
    """Outcome of a single upstream request (or of its retry loop)."""

    OK = "ok"
    NOT_FOUND = "not_found"
    THROTTLED = "throttled"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult:
    """Typed result of a request, so the retry loop never has to recurse."""

    status: FetchStatus
    records: list[dict[str, Any]] = field(default_factory=list)
    error: ErrorDetails | None = None


def backoff_seconds(attempt: int, base_delay_ms: int, increment_ms: int) -> float:
    """Delay before retry number `attempt` (zero-based): base plus a linear increment."""
    return (base_delay_ms + attempt * increment_ms) / 1000


class OdptHttpClient:
    """HTTP client for the ODPT open-data API."""

    def __init__(
        self,
        session: "ClientSession | None",
        token: str,
        base_url: str = ODPT_BASE_URL,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay_ms: int = DEFAULT_RETRY_BASE_DELAY_MS,
        retry_increment_ms: int = DEFAULT_RETRY_INCREMENT_MS,
        timeout_seconds: float = 10,
        throttle: RequestThrottle | None = None,
    ) -> None:
        """Initialize with an aiohttp session and the consumer key.

        Args:
            session: aiohttp ClientSession for HTTP requests.
            token: ODPT consumer key. An empty token means no credential.
            base_url: API root, without trailing slash.
            page_size: Records requested per page ($top).
            max_retries: Retries after an HTTP 429 before giving up.
            retry_base_delay_ms: Back-off before the first retry.
            retry_increment_ms: Back-off added for each further retry.
            timeout_seconds: Total timeout per request.
            throttle: Shared request throttle (a private one is created if omitted).
        """
        self._session = session
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size
        self._max_retries = max_retries
        self._retry_base_delay_ms = retry_base_delay_ms
        self._retry_increment_ms = retry_increment_ms
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._throttle = throttle or RequestThrottle("odpt_api")

    @property
    def has_credential(self) -> bool:
        """Whether a consumer key is configured."""
        return bool(self._token)

    def _build_params(self, filters: dict[str, Any] | None) -> dict[str, str]:
        """Query parameters for a request, consumer key included."""
        params = {k: str(v) for k, v in (filters or {}).items()}
        params[PARAM_CONSUMER_KEY] = self._token
        return params

    async def _read_error(self, response: "ClientResponse") -> ErrorDetails:
        """Build error details from a non-2xx response."""
        text = await response.text()
        reason = text[:ERROR_BODY_PREVIEW_CHARS] if text else (response.reason or "(empty body)")
        return ErrorDetails(status_code=response.status, reason=reason)

    async def _request_once(self, url: str, params: dict[str, str], attempt: int) -> FetchResult:
        """Issue one GET and classify its outcome."""
        if not self._session:
            raise RuntimeError("ODPT API requires an aiohttp session")

        log_api_request("GET", url, params=params, headers=DEFAULT_HEADERS, attempt=attempt)
        try:
            async with self._session.get(
                url, params=params, headers=DEFAULT_HEADERS, timeout=self._timeout
            ) as response:
                if response.status == 404:
                    return FetchResult(FetchStatus.NOT_FOUND)
                if response.status == 429:
                    return FetchResult(
                        FetchStatus.THROTTLED,
                        error=ErrorDetails(status_code=429, reason="rate limited by upstream"),
                    )
                if not 200 <= response.status < 300:
                    return FetchResult(FetchStatus.FAILED, error=await self._read_error(response))
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            return FetchResult(
                FetchStatus.FAILED, error=ErrorDetails(reason=f"{type(e).__name__}: {e}")
            )

        if not isinstance(data, list):
            return FetchResult(FetchStatus.OK)
        return FetchResult(FetchStatus.OK, [r for r in data if isinstance(r, dict)])

    async def _request_with_retry(self, url: str, params: dict[str, str]) -> FetchResult:
        """Issue a request, backing off and retrying while upstream answers 429."""
        result = FetchResult(FetchStatus.FAILED, error=ErrorDetails(reason="not attempted"))
        for attempt in range(self._max_retries + 1):
            await self._throttle.acquire()
            result = await self._request_once(url, params, attempt)
            if result.status is not FetchStatus.THROTTLED:
                return result
            if attempt < self._max_retries:
                delay = backoff_seconds(
                    attempt, self._retry_base_delay_ms, self._retry_increment_ms
                )
                logger.warning(
                    f"ODPT API throttled {url} (attempt {attempt + 1}), retrying in {delay:.1f}s"
                )
                await self._throttle.back_off(delay)
        return result

    async def fetch_records(
        self, resource: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch one request's worth of records.

        Returns an empty list for HTTP 404.

        Raises:
            MissingCredentialError: No consumer key is configured.
            FetchFailedError: Retries were exhausted or upstream returned an error.
        """
        if not self.has_credential:
            raise MissingCredentialError("ODPT consumer key is not configured")

        url = f"{self._base_url}/{resource}"
        result = await self._request_with_retry(url, self._build_params(params))

        if result.status is FetchStatus.OK:
            return result.records
        if result.status is FetchStatus.NOT_FOUND:
            logger.debug(f"ODPT API returned 404 for {resource}, treating as no data")
            return []

        details = result.error or ErrorDetails(reason="unknown error")
        if result.status is FetchStatus.THROTTLED:
            details = ErrorDetails(
                status_code=429,
                reason=f"rate limit retries exhausted after {self._max_retries} retries",
            )
        logger.error(f"ODPT API request for {resource} failed: {details.reason}")
        raise FetchFailedError(resource, details)

    async def fetch_collection(
        self, resource: str, filters: dict[str, str] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch every record of a resource by paging with $top/$skip.

        Paging stops at the first empty page. If the very first page is empty,
        one unparameterized request (filters only) is issued instead, because
        some upstream resources return nothing when paging parameters are given.

        Args:
            resource: ODPT resource name (e.g., "odpt:BusstopPole").
            filters: Query filters (e.g., {"odpt:operator": "odpt.Operator:Toei"}).

        Returns:
            All records of the collection.
        """
        filters = dict(filters or {})
        results: list[dict[str, Any]] = []
        skip = 0

        for _ in range(MAX_PAGES):
            page = await self.fetch_records(
                resource, {**filters, PARAM_TOP: self._page_size, PARAM_SKIP: skip}
            )
            if not page:
                if skip == 0:
                    logger.debug(
                        f"First page of {resource} was empty, retrying without paging parameters"
                    )
                    return await self.fetch_records(resource, filters)
                return results
            results.extend(page)
            skip += self._page_size

        logger.warning(f"Stopped paging {resource} after {MAX_PAGES} pages")
        return results
