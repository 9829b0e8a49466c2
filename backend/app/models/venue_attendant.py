"""
Attendance ledger: one row per (venue, user) declaring they are going.

The going count is always COUNT(*) over these rows; there is no stored counter.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class VenueAttendant(Base):
    __tablename__ = "venue_attendants"
    __table_args__ = (UniqueConstraint("venue_id", "user_id", name="uq_venue_attendants_venue_user"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    venue_id = Column(String(64), ForeignKey("venues.venue_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    venue = relationship("Venue", back_populates="attendants")
