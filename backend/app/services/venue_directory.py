"""
Venue directory: merge Yelp search/detail results with local attendance state.

A local Venue row is only a record that the venue has been seen. Names, images, ratings and
so on are fetched fresh from Yelp on every request and never stored. Registration is lazy
(first search hit or detail view) and idempotent: the venues primary key decides who wins
when two requests register the same id at once.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import (
    SEARCH_CATEGORIES,
    SEARCH_LOOKAHEAD_LIMIT,
    SEARCH_PAGE_SIZE,
    SEARCH_RADIUS_METERS,
    SEARCH_SORT_BY,
)
from app.core.errors import InvalidQuery, NoResults, VenueClosed
from app.models.venue import Venue
from app.services.attendance_service import attendant_count, attendant_counts
from app.services.providers.base import VenueProvider
from app.services.yelp.types import VenueDetail, VenueSummary

logger = logging.getLogger(__name__)


def _parse_coordinate(raw: Any, name: str, bound: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise InvalidQuery(f"{name} must be a number.") from e
    if math.isnan(value) or not -bound <= value <= bound:
        raise InvalidQuery(f"{name} must be between -{bound:g} and {bound:g}.")
    return value


@dataclass(frozen=True)
class SearchCriteria:
    """Either a free-text place (city, zip, ...) or a latitude/longitude pair."""

    location: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def parse(cls, location: str | None = None, latitude: Any = None, longitude: Any = None) -> "SearchCriteria":
        """Build from raw query params. A non-blank location wins; otherwise both coordinates are required."""
        place = (location or "").strip()
        if place:
            return cls(location=place)
        if latitude in (None, "") or longitude in (None, ""):
            raise InvalidQuery()
        return cls(
            latitude=_parse_coordinate(latitude, "latitude", 90),
            longitude=_parse_coordinate(longitude, "longitude", 180),
        )

    def to_params(self) -> dict[str, Any]:
        if self.location:
            return {"location": self.location}
        return {"latitude": self.latitude, "longitude": self.longitude}


def register_venue(db: Session, venue_id: str) -> bool:
    """Create the local record for venue_id. Returns False if it already existed (including a lost race)."""
    if db.get(Venue, venue_id) is not None:
        return False
    db.add(Venue(venue_id=venue_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    logger.info("Registered new venue: %s", venue_id)
    return True


def _known_venue_ids(db: Session, venue_ids: list[str]) -> set[str]:
    if not venue_ids:
        return set()
    rows = db.query(Venue.venue_id).filter(Venue.venue_id.in_(venue_ids)).all()
    return {r[0] for r in rows}


def _is_closed(business: dict[str, Any]) -> bool:
    return business.get("is_closed") is True


def search_venues(db: Session, provider: VenueProvider, criteria: SearchCriteria, page: int = 0) -> dict[str, Any]:
    """
    One page of open venues near criteria, each with its going count.

    Asks the provider for one result more than a page; if that lookahead comes back there is
    another page. Venues seen for the first time are registered with nobody going.
    """
    if page < 0:
        raise InvalidQuery("page must be zero or greater.")
    response = provider.search(
        categories=SEARCH_CATEGORIES,
        radius=SEARCH_RADIUS_METERS,
        limit=SEARCH_LOOKAHEAD_LIMIT,
        offset=SEARCH_PAGE_SIZE * page,
        sort_by=SEARCH_SORT_BY,
        **criteria.to_params(),
    )
    raw = response.get("businesses") or []
    if not (response.get("total") or 0) and not raw:
        raise NoResults()
    # Decided on the raw count: a malformed row still occupies a lookahead slot
    last_page = len(raw) < SEARCH_LOOKAHEAD_LIMIT
    businesses = [b for b in raw if isinstance(b, dict) and b.get("id")]
    open_businesses = [b for b in businesses if not _is_closed(b)][:SEARCH_PAGE_SIZE]

    ids = [str(b["id"]) for b in open_businesses]
    known = _known_venue_ids(db, ids)
    for venue_id in ids:
        if venue_id not in known:
            register_venue(db, venue_id)
    counts = attendant_counts(db, ids)

    venues: list[VenueSummary] = [
        {
            "id": str(b["id"]),
            "name": b.get("name") or "",
            "image": b.get("image_url") or None,
            "going": counts.get(str(b["id"]), 0),
        }
        for b in open_businesses
    ]
    return {"venues": venues, "lastPage": last_page}


def _display_address(business: dict[str, Any]) -> str:
    location = business.get("location") or {}
    parts = location.get("display_address") or []
    return ", ".join(str(p) for p in parts if p)


def fetch_venue_detail(db: Session, provider: VenueProvider, venue_id: str) -> VenueDetail:
    """
    Full attributes for venue_id plus its going count. Raises VenueClosed (no registration)
    if the business has closed for good; otherwise registers the venue if unseen.
    """
    business = provider.business(venue_id)
    if _is_closed(business):
        raise VenueClosed()
    register_venue(db, venue_id)
    return {
        "name": business.get("name") or "",
        "image": business.get("image_url") or None,
        "yelpUrl": business.get("url") or None,
        "price": business.get("price") or None,
        "rating": business.get("rating"),
        "address": _display_address(business),
        "phone": business.get("display_phone") or None,
        "going": attendant_count(db, venue_id),
    }
