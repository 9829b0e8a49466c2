"""
Typed definitions for Yelp Fusion responses and the venue shapes we return.

GET /businesses/search returns {"businesses": [...], "total": N}; GET /businesses/{id}
returns one business with the same core fields plus url, price, phone details.
"""

from typing import TypedDict


class YelpLocation(TypedDict, total=False):
    address1: str
    city: str
    zip_code: str
    display_address: list[str]


class YelpBusiness(TypedDict, total=False):
    """One business from search (businesses[]) or the detail endpoint."""
    id: str
    name: str
    image_url: str
    url: str
    price: str
    rating: float
    is_closed: bool  # True = closed for good, not "closed right now"
    distance: float  # meters, search only
    location: YelpLocation
    display_phone: str


class YelpSearchResponse(TypedDict, total=False):
    businesses: list[YelpBusiness]
    total: int


class VenueSummary(TypedDict):
    """Search list entry: display fields merged with the live going count."""
    id: str
    name: str
    image: str | None
    going: int


class VenueDetail(TypedDict):
    name: str
    image: str | None
    yelpUrl: str | None
    price: str | None
    rating: float | None
    address: str
    phone: str | None
    going: int
