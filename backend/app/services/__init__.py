from app.services.attendance_service import is_attending, toggle_attendance
from app.services.chatter_service import list_chatters, post_chatter, purge_expired_chatters
from app.services.venue_directory import fetch_venue_detail, search_venues

__all__ = [
    "is_attending",
    "toggle_attendance",
    "list_chatters",
    "post_chatter",
    "purge_expired_chatters",
    "fetch_venue_detail",
    "search_venues",
]
