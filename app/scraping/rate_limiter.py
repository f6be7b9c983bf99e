"""
Domain-aware request rate limiter.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from urllib.parse import urlparse


class DomainRateLimiter:
    """
    Enforces minimum interval between requests per domain.
    """

    def __init__(
        self,
        *,
        default_rate_limit_per_second: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_rate_limit_per_second = max(0.1, default_rate_limit_per_second)
        self._last_request_by_domain: dict[str, float] = {}
        self._lock = threading.Lock()
        self._sleep = sleep
        self._clock = clock

    def wait(self, *, url: str, rate_limit_per_second: float | None = None) -> float:
        """
        Sleep as needed so outbound requests respect per-domain throttling.

        Returns the number of seconds slept.
        """

        parsed = urlparse(url)
        domain = parsed.netloc.lower() or parsed.path.lower()
        if not domain:
            return 0.0

        effective_rps = max(0.1, rate_limit_per_second or self._default_rate_limit_per_second)
        min_interval = 1.0 / effective_rps

        with self._lock:
            now = self._clock()
            last_time = self._last_request_by_domain.get(domain)
            wait_seconds = 0.0
            if last_time is not None:
                wait_seconds = max(0.0, min_interval - (now - last_time))
            if wait_seconds > 0:
                self._sleep(wait_seconds)
            self._last_request_by_domain[domain] = self._clock()
        return wait_seconds
