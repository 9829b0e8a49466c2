"""
Attendance ledger: who is going to which venue.

Membership is one venue_attendants row per (venue, user); the going count is always the row
count, never a stored number. Toggles for one venue run under that venue's mutation lock and
publish only after the commit, so a viewer never sees an event the ledger does not reflect.
"""
import logging

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import EVENT_ATTENDANT_ADDED, EVENT_ATTENDANT_REMOVED
from app.core.errors import InternalFailure, VenueNotFound
from app.models.venue import Venue
from app.models.venue_attendant import VenueAttendant
from app.realtime.bus import PresenceEvent, PresenceEventBus, publish_quietly
from app.services.venue_locks import venue_locks

logger = logging.getLogger(__name__)

JOINED = "joined"
LEFT = "left"

# A flip loses a race only to a writer in another process; one re-read settles it
_TOGGLE_ATTEMPTS = 3


def require_venue(db: Session, venue_id: str) -> Venue:
    """Return the locally registered venue or raise VenueNotFound."""
    venue = db.get(Venue, venue_id)
    if venue is None:
        raise VenueNotFound()
    return venue


def is_member(db: Session, venue_id: str, user_id: str) -> bool:
    return (
        db.query(VenueAttendant.id)
        .filter(VenueAttendant.venue_id == venue_id, VenueAttendant.user_id == user_id)
        .first()
        is not None
    )


def is_attending(db: Session, venue_id: str, user_id: str) -> bool:
    """True if user_id is in the venue's attendant set."""
    require_venue(db, venue_id)
    return is_member(db, venue_id, user_id)


def attendant_count(db: Session, venue_id: str) -> int:
    """Going count: size of the attendant set."""
    return (
        db.query(func.count(VenueAttendant.id))
        .filter(VenueAttendant.venue_id == venue_id)
        .scalar()
        or 0
    )


def attendant_counts(db: Session, venue_ids: list[str]) -> dict[str, int]:
    """Going counts for many venues in one query. Venues with nobody going are absent."""
    if not venue_ids:
        return {}
    rows = (
        db.query(VenueAttendant.venue_id, func.count(VenueAttendant.id))
        .filter(VenueAttendant.venue_id.in_(venue_ids))
        .group_by(VenueAttendant.venue_id)
        .all()
    )
    return {venue_id: count for venue_id, count in rows}


def _flip(db: Session, venue_id: str, user_id: str) -> str | None:
    """One attempt at flipping membership. None means another writer got there first."""
    if is_member(db, venue_id, user_id):
        result = db.execute(
            delete(VenueAttendant).where(
                VenueAttendant.venue_id == venue_id,
                VenueAttendant.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            db.rollback()
            return None
        db.commit()
        return LEFT
    db.add(VenueAttendant(venue_id=venue_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return None
    return JOINED


def toggle_attendance(db: Session, bus: PresenceEventBus, venue_id: str, user_id: str) -> str:
    """
    Flip user_id's membership for venue_id. Returns JOINED or LEFT and publishes
    attendant-added / attendant-removed once the change is committed.
    """
    with venue_locks.hold(venue_id):
        require_venue(db, venue_id)
        for _ in range(_TOGGLE_ATTEMPTS):
            outcome = _flip(db, venue_id, user_id)
            if outcome is not None:
                break
        else:
            raise InternalFailure(f"Attendance toggle on venue {venue_id} kept conflicting.")
        event_type = EVENT_ATTENDANT_ADDED if outcome == JOINED else EVENT_ATTENDANT_REMOVED
        publish_quietly(bus, PresenceEvent(type=event_type, venue_id=venue_id))
    logger.debug("User %s %s venue %s", user_id, outcome, venue_id)
    return outcome
