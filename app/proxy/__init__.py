"""
Proxy resolution and the proxied fetch relay.
"""

from app.proxy.relay import ProxiedFetchRelay, RelayedAsset, guess_content_type
from app.proxy.resolver import (
    ProxyConfig,
    ProxyDecision,
    build_proxy_url,
    describe_proxy_status,
    get_proxy_decision,
    resolve_proxy,
)

__all__ = [
    "ProxiedFetchRelay",
    "ProxyConfig",
    "ProxyDecision",
    "RelayedAsset",
    "build_proxy_url",
    "describe_proxy_status",
    "get_proxy_decision",
    "guess_content_type",
    "resolve_proxy",
]
