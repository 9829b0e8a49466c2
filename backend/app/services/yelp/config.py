"""Yelp Fusion API config. Credentials from settings (YELP_API_KEY) or YelpClient args."""
from app.config import settings

DEFAULT_BASE_URL = "https://api.yelp.com/v3"


class YelpConfig:
    """API key, base URL and request timeout for Yelp Fusion."""

    __slots__ = ("api_key", "base_url", "timeout")

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = (api_key if api_key is not None else settings.yelp_api_key).strip()
        self.base_url = (base_url or settings.yelp_base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.yelp_timeout_seconds

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
