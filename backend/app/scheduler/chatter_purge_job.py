"""
Purge chatters past their 24-hour retention. Reads already hide them; this only reclaims rows,
the way a TTL index would.
"""
import logging

from app.db.session import SessionLocal
from app.services.chatter_service import purge_expired_chatters

logger = logging.getLogger(__name__)


def run_chatter_purge_job() -> int:
    db = SessionLocal()
    try:
        removed = purge_expired_chatters(db)
        if removed:
            logger.info("Purged %s expired chatters", removed)
        return removed
    except Exception as e:
        db.rollback()
        logger.warning("Chatter purge failed: %s", e, exc_info=True)
        return 0
    finally:
        db.close()
