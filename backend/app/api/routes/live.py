"""
Realtime channel: one websocket per open venue view.

The connection subscribes to the venue's events, tells the client it is subscribed (so it can
fetch current attendance and chatters without missing anything after that point), then
forwards events until either side goes away.
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.api.deps import get_bus
from app.core.constants import EVENT_SUBSCRIBED
from app.realtime.bus import PresenceEventBus, Subscription

router = APIRouter()
logger = logging.getLogger(__name__)


async def _close_on_disconnect(websocket: WebSocket, subscription: Subscription) -> None:
    """Drain client frames; when the client leaves, end the subscription so the sender loop stops."""
    try:
        while True:
            message = await websocket.receive()
            if message.get("type") == "websocket.disconnect":
                break
    except (WebSocketDisconnect, RuntimeError):
        pass
    finally:
        subscription.close()


@router.websocket("/ws/venues/{venue_id}")
async def venue_events(
    websocket: WebSocket,
    venue_id: str,
    bus: PresenceEventBus = Depends(get_bus),
):
    await websocket.accept()
    subscription = bus.subscribe(venue_id)
    watcher = asyncio.create_task(_close_on_disconnect(websocket, subscription))
    try:
        await websocket.send_json({"type": EVENT_SUBSCRIBED, "venueId": venue_id})
        async for event in subscription:
            await websocket.send_json(event.to_message())
    except (WebSocketDisconnect, RuntimeError):
        logger.debug("Viewer of venue %s went away mid-send", venue_id)
    finally:
        subscription.close()
        watcher.cancel()
