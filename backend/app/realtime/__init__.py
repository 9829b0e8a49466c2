"""In-process realtime fan-out for venue viewers."""
from app.realtime.bus import PresenceEvent, PresenceEventBus, Subscription, publish_quietly

__all__ = ["PresenceEvent", "PresenceEventBus", "Subscription", "publish_quietly"]
