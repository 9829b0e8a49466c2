from app.models.chatter import Chatter
from app.models.venue import Venue
from app.models.venue_attendant import VenueAttendant

__all__ = [
    "Chatter",
    "Venue",
    "VenueAttendant",
]
