"""Venue providers: Yelp today; same contract for any other directory."""
from app.services.providers.base import VenueProvider
from app.services.providers.registry import DEFAULT_PROVIDER, get_provider, register

__all__ = ["VenueProvider", "DEFAULT_PROVIDER", "get_provider", "register"]
