"""Locally known venue. Exists once the venue has been seen via search or detail lookup."""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Venue(Base):
    __tablename__ = "venues"

    # Yelp business id; primary key doubles as the uniqueness constraint for lazy registration
    venue_id = Column(String(64), primary_key=True)
    first_seen_at = Column(DateTime(timezone=True), server_default=func.now())

    attendants = relationship(
        "VenueAttendant",
        back_populates="venue",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
