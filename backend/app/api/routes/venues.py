"""
Venue API: search, detail, attendance and chatter.

Mounted under /api/venue. Read-only routes need no login; attending, toggleAttend and
posting a chatter need a bearer token.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_bus, get_identity, get_venue_provider
from app.core.constants import CHATTER_LIST_LIMIT
from app.db.session import get_db
from app.realtime.bus import PresenceEventBus
from app.services.attendance_service import is_attending, toggle_attendance
from app.services.auth import Identity
from app.services.chatter_service import list_chatters, post_chatter
from app.services.providers import VenueProvider
from app.services.venue_directory import SearchCriteria, fetch_venue_detail, search_venues
from app.services.venue_locks import venue_gates

router = APIRouter()
logger = logging.getLogger(__name__)


class ChatterPost(BaseModel):
    body: str | None = None


@router.get("/search")
def search(
    location: str | None = Query(None),
    latitude: str | None = Query(None),
    longitude: str | None = Query(None),
    page: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    provider: VenueProvider = Depends(get_venue_provider),
) -> dict[str, Any]:
    """Open bars near a place name or coordinates, 20 per page, with going counts."""
    criteria = SearchCriteria.parse(location, latitude, longitude)
    return search_venues(db, provider, criteria, page)


@router.get("/view/{venue_id}")
@router.get("/detail/{venue_id}")
def view_venue(
    venue_id: str,
    db: Session = Depends(get_db),
    provider: VenueProvider = Depends(get_venue_provider),
) -> dict[str, Any]:
    """Venue details fresh from Yelp plus the live going count."""
    return {"venue": fetch_venue_detail(db, provider, venue_id)}


@router.get("/attending/{venue_id}")
def attending(
    venue_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> dict[str, bool]:
    return {"attending": is_attending(db, venue_id, identity.user_id)}


@router.put("/toggleAttend/{venue_id}")
async def toggle_attend(
    venue_id: str,
    db: Session = Depends(get_db),
    bus: PresenceEventBus = Depends(get_bus),
    identity: Identity = Depends(get_identity),
) -> Response:
    """Join if not going, leave if going. Viewers of the venue get the change over the websocket."""
    async with venue_gates.hold(venue_id):
        outcome = await run_in_threadpool(toggle_attendance, db, bus, venue_id, identity.user_id)
    return Response(status_code=200, headers={"X-Attendance": outcome})


@router.post("/chatter/{venue_id}")
async def create_chatter(
    venue_id: str,
    payload: ChatterPost,
    db: Session = Depends(get_db),
    bus: PresenceEventBus = Depends(get_bus),
    identity: Identity = Depends(get_identity),
) -> Response:
    """Post a chatter (attendees only). The content reaches viewers as a chatter-posted event."""
    async with venue_gates.hold(venue_id):
        await run_in_threadpool(post_chatter, db, bus, venue_id, identity, payload.body)
    return Response(status_code=200)


@router.get("/chatters/{venue_id}")
def chatters(
    venue_id: str,
    limit: int = Query(CHATTER_LIST_LIMIT, ge=1, le=CHATTER_LIST_LIMIT),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Unexpired chatters, newest first. Public: anyone viewing the venue can read them."""
    return {"chatters": list_chatters(db, venue_id, limit)}
