"""Chatter: short, venue-scoped public message that expires 24h after posting."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from app.db.base import Base


class Chatter(Base):
    __tablename__ = "chatters"
    __table_args__ = (Index("ix_chatters_venue_created", "venue_id", "created_at"),)

    # Insertion sequence; breaks ties between identical timestamps
    id = Column(Integer, primary_key=True, autoincrement=True)
    venue_id = Column(String(64), ForeignKey("venues.venue_id", ondelete="CASCADE"), nullable=False)
    author_name = Column(String(128), nullable=False)
    body = Column(String(140), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
