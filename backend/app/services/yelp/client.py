"""Yelp Fusion client: lowest level, sends the request and classifies transport failures."""
import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.core.errors import (
    STATUS_BAD_GATEWAY,
    STATUS_GATEWAY_TIMEOUT,
    STATUS_SERVICE_UNAVAILABLE,
    UpstreamUnavailable,
)
from app.services.yelp.config import YelpConfig

logger = logging.getLogger(__name__)


class YelpClient:
    """Yelp business search and detail client. Every failure surfaces as UpstreamUnavailable."""

    provider_id = "yelp"

    def __init__(self, config: YelpConfig | None = None, *, transport: httpx.BaseTransport | None = None) -> None:
        self._config = config or YelpConfig()
        self._transport = transport

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self._config.is_configured():
            raise UpstreamUnavailable(
                "Yelp credentials not configured. Add YELP_API_KEY to .env.",
                status_code=STATUS_SERVICE_UNAVAILABLE,
            )
        url = f"{self._config.base_url}{path}"
        try:
            with httpx.Client(timeout=self._config.timeout, transport=self._transport) as c:
                r = c.get(url, params=params, headers=self._config.headers())
        except httpx.TimeoutException as e:
            logger.warning("Yelp request timed out: %s %s", path, e)
            raise UpstreamUnavailable(status_code=STATUS_GATEWAY_TIMEOUT) from e
        except httpx.HTTPError as e:
            logger.warning("Yelp request failed: %s %s", path, e)
            raise UpstreamUnavailable(status_code=STATUS_SERVICE_UNAVAILABLE) from e
        if not r.is_success:
            logger.warning("Yelp API error %s on %s: %s", r.status_code, path, r.text[:500] if r.text else "")
            raise UpstreamUnavailable(status_code=r.status_code)
        try:
            body = r.json() if r.content else {}
        except ValueError as e:
            logger.warning("Yelp returned non-JSON body on %s", path)
            raise UpstreamUnavailable(status_code=STATUS_BAD_GATEWAY) from e
        if not isinstance(body, dict):
            raise UpstreamUnavailable(status_code=STATUS_BAD_GATEWAY)
        return body

    def search(self, **params: Any) -> dict[str, Any]:
        """GET /businesses/search. Params pass through (categories, radius, limit, offset, sort_by, location|latitude+longitude)."""
        return self._get("/businesses/search", {k: v for k, v in params.items() if v is not None})

    def business(self, venue_id: str) -> dict[str, Any]:
        """GET /businesses/{id}: full attributes including is_closed."""
        return self._get(f"/businesses/{quote(venue_id, safe='')}")
