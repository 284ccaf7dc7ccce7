"""Transit data gateway port."""

from typing import Any, Protocol


class TransitDataGateway(Protocol):
    """Port for fetching raw collections from the upstream open-data API."""

    @property
    def has_credential(self) -> bool:
        """Whether an API credential is configured."""
        ...

    async def fetch_collection(
        self, resource: str, filters: dict[str, str] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch every record of a resource matching the filters."""
        ...
