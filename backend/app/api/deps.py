"""Shared route dependencies: event bus, venue provider, caller identity."""
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from app.realtime.bus import PresenceEventBus
from app.services.auth import Identity, resolve_identity
from app.services.providers import VenueProvider, get_provider

# auto_error=False: a missing header becomes our own 401 envelope, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_bus(connection: HTTPConnection) -> PresenceEventBus:
    """The process-wide bus created in the app lifespan."""
    return connection.app.state.bus


def get_venue_provider() -> VenueProvider:
    return get_provider()


def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    """Verified caller for mutating routes. Raises Unauthenticated (401)."""
    return resolve_identity(credentials.credentials if credentials else None)
