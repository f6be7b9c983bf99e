"""
Single-attempt HTTP(S) GET, either direct or through the forward proxy.

Direct fetches run on a session built with `trust_env=False`, so ambient
HTTP_PROXY / HTTPS_PROXY variables are ignored without touching the process
environment. Proxied fetches use classic forward-proxy framing: the request is
sent to the proxy with the absolute target URL as request target.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import requests
from requests.adapters import HTTPAdapter

from app.config import DEFAULT_USER_AGENT
from app.errors import TransportError, UpstreamStatusError
from app.proxy.resolver import ProxyConfig, ProxyDecision

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"
MAX_PROXY_REDIRECTS = 5

_EXTENSION_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}
_REDIRECT_STATUS_CODES = {301, 302, 303, 307, 308}


@dataclass(frozen=True)
class RelayedAsset:
    """
    Raw payload returned by the relay.
    """

    url: str
    content: bytes
    content_type: str
    status_code: int
    encoding: str | None = None

    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")


class ForwardProxyAdapter(HTTPAdapter):
    """
    Transport adapter that writes the absolute target URL as request target.

    The session request itself is addressed to the proxy; only the request
    line carries the real destination.
    """

    def __init__(self, target_url: str, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self.target_url = target_url

    def request_url(self, request: requests.PreparedRequest, proxies: Mapping[str, str]) -> str:
        return self.target_url


def guess_content_type(url: str, default: str = DEFAULT_CONTENT_TYPE) -> str:
    """
    Infer a content type from the URL path's file extension.
    """

    path = urlparse(url).path.lower()
    for extension, content_type in _EXTENSION_CONTENT_TYPES.items():
        if path.endswith(extension):
            return content_type
    return default


def proxy_authorization_header(config: ProxyConfig) -> str:
    token = base64.b64encode(f"{config.username}:{config.password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class ProxiedFetchRelay:
    """
    Performs exactly one outbound GET per call; retries belong to callers.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._session_factory = session_factory

    def fetch(
        self,
        target_url: str,
        decision: ProxyDecision,
        *,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RelayedAsset:
        """
        Fetch `target_url` and return its raw bytes.

        Raises TransportError on network failure and UpstreamStatusError on a
        non-2xx upstream status.
        """

        _require_absolute_url(target_url)
        request_headers = {"User-Agent": self._user_agent, **(headers or {})}
        effective_timeout = self._timeout_seconds if timeout is None else timeout

        session = self._session_factory()
        session.trust_env = False
        try:
            if decision.enabled and decision.config is not None:
                response = self._get_via_proxy(
                    session,
                    target_url=target_url,
                    config=decision.config,
                    headers=request_headers,
                    timeout=effective_timeout,
                )
            else:
                response = session.get(
                    target_url,
                    headers=request_headers,
                    timeout=effective_timeout,
                    allow_redirects=True,
                )
        except requests.RequestException as exc:
            logger.warning("Relay fetch failed url=%s proxied=%s error=%s", target_url, decision.enabled, exc)
            raise TransportError(f"Failed to reach {target_url}: {exc}") from exc
        finally:
            session.close()

        if not 200 <= response.status_code < 300:
            logger.warning("Relay upstream status url=%s status=%s", target_url, response.status_code)
            raise UpstreamStatusError(
                f"Upstream returned status {response.status_code} for {target_url}",
                status_code=response.status_code,
                url=target_url,
            )

        return RelayedAsset(
            url=target_url,
            content=response.content,
            content_type=guess_content_type(target_url),
            status_code=response.status_code,
            encoding=response.encoding or response.apparent_encoding,
        )

    def _get_via_proxy(
        self,
        session: requests.Session,
        *,
        target_url: str,
        config: ProxyConfig,
        headers: Mapping[str, str],
        timeout: float,
    ) -> requests.Response:
        proxy_base = f"http://{config.host}:{config.port}/"
        current_url = target_url
        adapter = ForwardProxyAdapter(current_url)
        session.mount("http://", adapter)
        for _ in range(MAX_PROXY_REDIRECTS + 1):
            target = urlparse(current_url)
            proxied_headers = {**headers, "Host": target.netloc}
            if config.has_credentials:
                proxied_headers["Proxy-Authorization"] = proxy_authorization_header(config)

            adapter.target_url = current_url
            response = session.get(
                proxy_base,
                headers=proxied_headers,
                timeout=timeout,
                allow_redirects=False,
            )
            location = response.headers.get("Location")
            if response.status_code not in _REDIRECT_STATUS_CODES or not location:
                return response
            current_url = urljoin(current_url, location)
        raise requests.TooManyRedirects(f"Exceeded {MAX_PROXY_REDIRECTS} redirects via proxy")


def _require_absolute_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"Target URL must be an absolute http(s) URL: {url!r}")
