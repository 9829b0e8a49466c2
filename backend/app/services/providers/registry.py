"""Registry of venue providers. Add new clients here."""
import logging

from app.services.providers.base import VenueProvider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "yelp"

_providers: dict[str, VenueProvider] = {}


def register(name: str, provider: VenueProvider) -> None:
    """Register a provider (e.g. 'yelp')."""
    _providers[name] = provider
    logger.info("Registered venue provider: %s", name)


def get_provider(name: str = DEFAULT_PROVIDER) -> VenueProvider:
    """Get provider by name. Raises KeyError if unknown."""
    if name not in _providers:
        raise KeyError(f"Unknown provider: {name}. Available: {list(_providers.keys())}")
    return _providers[name]


def _init_registry() -> None:
    from app.services.yelp import YelpClient

    register(DEFAULT_PROVIDER, YelpClient())


# Register built-in providers on first import
_init_registry()
