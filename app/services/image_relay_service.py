"""
app/services/image_relay_service.py

Relays remote product images through the configured proxy.
"""

from __future__ import annotations

from functools import lru_cache

from app.config import ImageRelaySettings, get_image_relay_settings
from app.proxy import ProxiedFetchRelay, ProxyDecision, RelayedAsset, get_proxy_decision


class ImageRelayService:
    """
    Fetches one image per call; the caller maps errors to HTTP statuses.
    """

    def __init__(
        self,
        *,
        settings: ImageRelaySettings,
        relay: ProxiedFetchRelay | None = None,
        proxy_decision: ProxyDecision | None = None,
    ) -> None:
        self._settings = settings
        self._relay = relay or ProxiedFetchRelay(
            timeout_seconds=settings.timeout_seconds,
            user_agent=settings.user_agent,
        )
        self._proxy_decision = proxy_decision

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self._settings.cache_max_age_seconds}, immutable"

    def fetch(self, url: str) -> RelayedAsset:
        decision = self._proxy_decision if self._proxy_decision is not None else get_proxy_decision()
        return self._relay.fetch(url, decision)


@lru_cache(maxsize=1)
def get_image_relay_service() -> ImageRelayService:
    return ImageRelayService(settings=get_image_relay_settings())
