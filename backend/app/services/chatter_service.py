"""
Chatter stream: tweet-sized venue messages that expire 24 hours after posting.

post_chatter is the only write path, so the attendance precondition and the length cap are
checked in exactly one place. Reads filter on the retention window themselves; the purge job
only reclaims space.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, func
from sqlalchemy.orm import Session

from app.core.constants import (
    CHATTER_LIST_LIMIT,
    CHATTER_MAX_LENGTH,
    CHATTER_TTL_SECONDS,
    EVENT_CHATTER_POSTED,
)
from app.core.errors import BodyTooLong, InvalidQuery, NoChatters, NotAttending
from app.models.chatter import Chatter
from app.realtime.bus import PresenceEvent, PresenceEventBus, publish_quietly
from app.services.attendance_service import is_member, require_venue
from app.services.auth import Identity
from app.services.venue_locks import venue_locks

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Timestamps come back naive from SQLite; everything we write is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def retention_cutoff(now: datetime | None = None) -> datetime:
    """Chatters created at or before this instant are expired."""
    return (now or _utcnow()) - timedelta(seconds=CHATTER_TTL_SECONDS)


def _validate_body(body: str | None) -> str:
    if body is None or not body.strip():
        raise InvalidQuery("Chatter comments cannot be empty.")
    if len(body) > CHATTER_MAX_LENGTH:
        raise BodyTooLong()
    return body


def _next_timestamp(db: Session, venue_id: str, now: datetime) -> datetime:
    """Never earlier than the venue's latest chatter, so insertion order stays chronological."""
    latest = db.query(func.max(Chatter.created_at)).filter(Chatter.venue_id == venue_id).scalar()
    if latest is not None and _as_utc(latest) > now:
        return _as_utc(latest)
    return now


def post_chatter(
    db: Session,
    bus: PresenceEventBus,
    venue_id: str,
    author: Identity,
    body: str | None,
    *,
    now: datetime | None = None,
) -> None:
    """
    Append a chatter from an attending user and publish chatter-posted.

    Order of checks: venue registered, author attending, body valid. Nothing is written
    unless all three pass.
    """
    with venue_locks.hold(venue_id):
        require_venue(db, venue_id)
        if not is_member(db, venue_id, author.user_id):
            raise NotAttending()
        body = _validate_body(body)
        created_at = _next_timestamp(db, venue_id, _as_utc(now) if now else _utcnow())
        db.add(
            Chatter(
                venue_id=venue_id,
                author_name=author.display_name,
                body=body,
                created_at=created_at,
            )
        )
        db.commit()
        publish_quietly(
            bus,
            PresenceEvent(
                type=EVENT_CHATTER_POSTED,
                venue_id=venue_id,
                payload={"author": author.display_name, "body": body},
            ),
        )
    logger.debug("Chatter posted on venue %s by %s", venue_id, author.user_id)


def list_chatters(
    db: Session,
    venue_id: str,
    limit: int = CHATTER_LIST_LIMIT,
    *,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Unexpired chatters for venue_id, newest first, at most min(limit, 100). Raises NoChatters if empty."""
    require_venue(db, venue_id)
    limit = max(1, min(int(limit), CHATTER_LIST_LIMIT))
    rows = (
        db.query(Chatter)
        .filter(Chatter.venue_id == venue_id, Chatter.created_at > retention_cutoff(now))
        .order_by(Chatter.created_at.desc(), Chatter.id.desc())
        .limit(limit)
        .all()
    )
    if not rows:
        raise NoChatters()
    return [
        {
            "author": r.author_name,
            "body": r.body,
            "postedAt": _as_utc(r.created_at).isoformat(),
        }
        for r in rows
    ]


def purge_expired_chatters(db: Session, *, now: datetime | None = None) -> int:
    """Delete chatters past retention. Returns the number of rows removed."""
    result = db.execute(delete(Chatter).where(Chatter.created_at <= retention_cutoff(now)))
    db.commit()
    return result.rowcount or 0
