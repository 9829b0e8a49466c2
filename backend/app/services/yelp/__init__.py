"""Yelp Fusion API client and response types."""
from app.services.yelp.client import YelpClient
from app.services.yelp.config import YelpConfig
from app.services.yelp.types import (
    VenueDetail,
    VenueSummary,
    YelpBusiness,
    YelpLocation,
    YelpSearchResponse,
)

__all__ = [
    "YelpClient",
    "YelpConfig",
    "VenueDetail",
    "VenueSummary",
    "YelpBusiness",
    "YelpLocation",
    "YelpSearchResponse",
]
