"""
Forward proxy resolution from process configuration.

The resolver never raises: an incomplete proxy configuration disables the
proxy and the caller proceeds with direct fetches.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any
from urllib.parse import quote

from app.config import TRUTHY_VALUES
from app.errors import ConfigurationError
from db.config import load_env_files

logger = logging.getLogger(__name__)

_SCHEME_PREFIX = re.compile(r"^https?://", flags=re.IGNORECASE)


@dataclass(frozen=True)
class ProxyConfig:
    host: str
    port: int
    username: str | None = None
    password: str | None = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def __repr__(self) -> str:
        # Keeps credentials out of tracebacks and debug logs.
        return (
            f"ProxyConfig(host={self.host!r}, port={self.port}, "
            f"auth={'yes' if self.has_credentials else 'no'})"
        )


@dataclass(frozen=True)
class ProxyDecision:
    enabled: bool
    config: ProxyConfig | None = None

    @classmethod
    def disabled(cls) -> "ProxyDecision":
        return cls(enabled=False)


def resolve_proxy(environ: Mapping[str, str] | None = None) -> ProxyDecision:
    """
    Decide whether outbound fetches go through the forward proxy.

    Reads USE_PROXY and PROXY_HOST / PROXY_PORT / PROXY_USERNAME / PROXY_PASSWORD.
    A missing switch means no proxy.
    """

    if environ is None:
        load_env_files()
        environ = os.environ

    use_proxy = (environ.get("USE_PROXY") or "").strip().lower() in TRUTHY_VALUES
    if not use_proxy:
        return ProxyDecision.disabled()

    try:
        config = _config_from_env(environ)
    except ConfigurationError as exc:
        logger.warning("USE_PROXY is set but the proxy is misconfigured (%s); proxy disabled.", exc)
        return ProxyDecision.disabled()

    return ProxyDecision(enabled=True, config=config)


@lru_cache(maxsize=1)
def get_proxy_decision() -> ProxyDecision:
    """
    Process-wide proxy decision, read once.
    """

    decision = resolve_proxy()
    logger.info("Proxy resolved proxy_enabled=%s", decision.enabled)
    return decision


def build_proxy_url(config: ProxyConfig, *, scheme: str = "http") -> str:
    """
    Build the proxy URL, embedding credentials when both are present.

    The result may contain a password: never log it.
    """

    auth = ""
    if config.has_credentials:
        auth = f"{quote(config.username or '', safe='')}:{quote(config.password or '', safe='')}@"
    return f"{scheme}://{auth}{config.host}:{config.port}"


def validate_proxy_config(config: ProxyConfig) -> bool:
    if not config.host or not config.port:
        return False
    return 1 <= config.port <= 65535


def describe_proxy_status(decision: ProxyDecision) -> dict[str, Any]:
    """
    Loggable summary of a decision. Contains no host, URL or credentials.
    """

    return {
        "proxy_enabled": decision.enabled,
        "proxy_auth": bool(decision.config and decision.config.has_credentials),
    }


def _config_from_env(environ: Mapping[str, str]) -> ProxyConfig:
    raw_host = (environ.get("PROXY_HOST") or "").strip()
    raw_port = (environ.get("PROXY_PORT") or "").strip()
    if not raw_host:
        raise ConfigurationError("PROXY_HOST is not set")
    if not raw_port:
        raise ConfigurationError("PROXY_PORT is not set")

    host = _SCHEME_PREFIX.sub("", raw_host).rstrip("/")
    try:
        port = int(raw_port)
    except ValueError as exc:
        raise ConfigurationError("PROXY_PORT is not a number") from exc

    username = (environ.get("PROXY_USERNAME") or "").strip() or None
    password = environ.get("PROXY_PASSWORD") or None
    if not (username and password):
        username = password = None
    config = ProxyConfig(host=host, port=port, username=username, password=password)
    if not validate_proxy_config(config):
        raise ConfigurationError("PROXY_HOST/PROXY_PORT out of range")
    return config
