"""Protocol for venue providers. The directory only depends on this contract."""
from typing import Any, Protocol


class VenueProvider(Protocol):
    """Interface for Yelp (or a fake in tests). Raise UpstreamUnavailable on any failure."""

    @property
    def provider_id(self) -> str:
        """Unique id (e.g. 'yelp')."""
        ...

    def search(self, **params: Any) -> dict[str, Any]:
        """Search businesses. Returns {"businesses": [...], "total": N}."""
        ...

    def business(self, venue_id: str) -> dict[str, Any]:
        """Full attributes for one business, including is_closed."""
        ...
