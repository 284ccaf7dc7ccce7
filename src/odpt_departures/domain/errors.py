"""Errors raised by the transit data layer."""

from odpt_departures.domain.models.error_details import ErrorDetails


class TransitDataError(Exception):
    """Base class for failures while assembling departures."""


class FetchFailedError(TransitDataError):
    """An upstream fetch failed after the gateway gave up on it."""

    def __init__(self, resource: str, details: ErrorDetails) -> None:
        self.resource = resource
        self.details = details
        status = f" (status {details.status_code})" if details.status_code is not None else ""
        super().__init__(f"Fetching {resource} failed{status}: {details.reason}")


class MissingCredentialError(TransitDataError):
    """No upstream API token has been configured."""
