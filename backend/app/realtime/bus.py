"""
Presence event bus: in-memory pub/sub that fans venue events out to live viewers.

Each venue is a channel holding its own subscriber list and lock, so subscribe/unsubscribe/
publish on one venue never wait on another. Publishers may run in worker threads (sync routes);
each Subscription belongs to one asyncio loop and receives events through
loop.call_soon_threadsafe, which keeps per-subscriber FIFO order.

Delivery is best-effort and at-most-once: no persistence, replay or retry. A late subscriber
sees nothing published before it subscribed; a full subscriber queue drops the event for that
subscriber only.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from app.core.constants import SUBSCRIBER_QUEUE_SIZE

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass(frozen=True)
class PresenceEvent:
    type: str  # attendant-added | attendant-removed | chatter-posted
    venue_id: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        """Wire shape for the websocket: {type, venueId, ...payload}."""
        return {"type": self.type, "venueId": self.venue_id, **self.payload}


class Subscription:
    """Live, non-restartable stream of events for one venue. Async-iterate it; close() to stop."""

    def __init__(
        self,
        bus: PresenceEventBus,
        venue_id: str,
        loop: asyncio.AbstractEventLoop,
        maxsize: int,
    ) -> None:
        self.venue_id = venue_id
        self._bus = bus
        self._loop = loop
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = 0

    def _offer(self, event: PresenceEvent) -> bool:
        """Hand an event to the owning loop. Called with the channel lock held."""
        if self._closed:
            return False
        try:
            self._loop.call_soon_threadsafe(self._put, event)
        except RuntimeError:
            # Owning loop is gone (connection torn down without unsubscribe)
            return False
        return True

    def _put(self, event: PresenceEvent) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Dropping %s for slow viewer of venue %s", event.type, self.venue_id)

    def _wake(self) -> None:
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # Reader is not blocked; it sees the closed flag on its next step
            pass

    def _mark_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._loop.call_soon_threadsafe(self._wake)
        except RuntimeError:
            pass

    def close(self) -> None:
        """Stop delivery. Idempotent."""
        self._bus.unsubscribe(self)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> PresenceEvent:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED or self._closed:
            raise StopAsyncIteration
        return item

    async def get(self, timeout: float | None = None) -> PresenceEvent | None:
        """Next event, or None if closed. Raises asyncio.TimeoutError after timeout seconds."""
        try:
            return await asyncio.wait_for(self.__anext__(), timeout)
        except StopAsyncIteration:
            return None


class _Channel:
    __slots__ = ("lock", "subscribers", "retired")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.subscribers: list[Subscription] = []
        self.retired = False


class PresenceEventBus:
    """Per-venue channels of subscriptions. Created once per process and injected where needed."""

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._channels: dict[str, _Channel] = {}
        # Held only to create or retire a channel, never while delivering
        self._registry_lock = threading.Lock()

    def _channel_for(self, venue_id: str) -> _Channel:
        with self._registry_lock:
            channel = self._channels.get(venue_id)
            if channel is None:
                channel = self._channels[venue_id] = _Channel()
            return channel

    def subscribe(self, venue_id: str, loop: asyncio.AbstractEventLoop | None = None) -> Subscription:
        """Start receiving events for venue_id. Without loop, must be called from the consuming loop."""
        loop = loop or asyncio.get_running_loop()
        subscription = Subscription(self, venue_id, loop, self._queue_size)
        while True:
            channel = self._channel_for(venue_id)
            with channel.lock:
                if channel.retired:
                    continue
                channel.subscribers.append(subscription)
                break
        logger.debug("Subscribed to venue %s", venue_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Stop delivery to subscription. Returns False if it was already unsubscribed."""
        removed = False
        channel = self._channels.get(subscription.venue_id)
        if channel is not None:
            with channel.lock:
                if subscription in channel.subscribers:
                    channel.subscribers.remove(subscription)
                    removed = True
                empty = not channel.subscribers
            if removed and empty:
                self._retire(subscription.venue_id, channel)
        subscription._mark_closed()
        if removed:
            logger.debug("Unsubscribed from venue %s", subscription.venue_id)
        return removed

    def _retire(self, venue_id: str, channel: _Channel) -> None:
        with self._registry_lock:
            with channel.lock:
                if channel.subscribers or self._channels.get(venue_id) is not channel:
                    return
                channel.retired = True
                del self._channels[venue_id]

    def publish(self, venue_id: str, event: PresenceEvent) -> int:
        """Deliver event to every live subscription of venue_id. Returns how many it was handed to."""
        channel = self._channels.get(venue_id)
        if channel is None:
            return 0
        with channel.lock:
            return sum(1 for subscription in channel.subscribers if subscription._offer(event))

    def subscriber_count(self, venue_id: str) -> int:
        channel = self._channels.get(venue_id)
        if channel is None:
            return 0
        with channel.lock:
            return len(channel.subscribers)

    def venue_ids(self) -> list[str]:
        """Venues with at least one live viewer."""
        with self._registry_lock:
            return list(self._channels.keys())


def publish_quietly(bus: PresenceEventBus, event: PresenceEvent) -> int:
    """
    Publish after a committed write. A failure here is logged, not raised: the database is
    already the source of truth and viewers catch up on their next read.
    """
    try:
        return bus.publish(event.venue_id, event)
    except Exception:
        logger.exception("Failed to publish %s for venue %s", event.type, event.venue_id)
        return 0
