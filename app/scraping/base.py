"""
Site adapter contract and the shared page-fetching machinery.

Adapters are plain classes satisfying `SiteAdapter`; they receive a
`PageFetcher` instead of inheriting fetch mechanics.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from typing import Protocol, runtime_checkable
from urllib.parse import urldefrag

from bs4 import BeautifulSoup

from app.domain.product import ProductRef, RawProduct
from app.errors import ListDiscoveryError
from app.proxy.relay import ProxiedFetchRelay
from app.proxy.resolver import ProxyDecision
from app.scraping.config.models import ProductScrapingSettings, SiteDefinition
from app.logging_utils import log_event
from app.scraping.parsing import HTMLParsingLayer
from app.scraping.rate_limiter import DomainRateLimiter

logger = logging.getLogger(__name__)

ListingParser = Callable[[BeautifulSoup, str], list[ProductRef]]
NextPageResolver = Callable[[BeautifulSoup, str, int], "str | None"]


@runtime_checkable
class SiteAdapter(Protocol):
    """
    Capability interface implemented once per retail site.
    """

    site: SiteDefinition

    def list_products(self) -> Iterable[ProductRef]:
        """
        Enumerate product candidates. Finite and not restartable.
        """

    def fetch_detail(self, ref: ProductRef) -> RawProduct:
        """
        Return full product fields for one candidate.
        """


class PageFetcher:
    """
    Fetches and parses pages for one site through the relay.
    """

    def __init__(
        self,
        *,
        site: SiteDefinition,
        settings: ProductScrapingSettings,
        relay: ProxiedFetchRelay,
        proxy_decision: ProxyDecision,
        rate_limiter: DomainRateLimiter,
        sleep: Callable[[float], None] = time.sleep,
        timeout_seconds: float | None = None,
    ) -> None:
        self.site = site
        self.settings = settings
        self._relay = relay
        self._proxy_decision = proxy_decision
        self._rate_limiter = rate_limiter
        self._sleep = sleep
        self._timeout_seconds = timeout_seconds or settings.timeout_seconds
        self.category_errors: list[str] = []

    @property
    def max_pages_per_category(self) -> int:
        return self.site.max_pages_per_category or self.settings.max_pages_per_category

    def get_html(self, url: str) -> str:
        # Fragments never reach the server.
        request_url, _ = urldefrag(url)
        self._rate_limiter.wait(url=request_url, rate_limit_per_second=self.site.rate_limit_per_second)
        asset = self._relay.fetch(
            request_url,
            self._proxy_decision,
            timeout=self._timeout_seconds,
            headers=self.site.headers,
        )
        return asset.text()

    def get_soup(self, url: str) -> BeautifulSoup:
        return HTMLParsingLayer.soup(self.get_html(url))

    def pause(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)


def crawl_categories(
    fetcher: PageFetcher,
    *,
    parse_listing: ListingParser,
    next_page_url: NextPageResolver,
) -> Iterator[ProductRef]:
    """
    Walk every category of `fetcher.site` page by page and yield product refs.

    A failing category is logged, recorded on `fetcher.category_errors` and
    skipped. ListDiscoveryError is raised only when every category failed.
    """

    site = fetcher.site
    category_errors: list[str] = []
    seen_urls: set[str] = set()

    for index, category_url in enumerate(site.category_urls):
        if index > 0:
            fetcher.pause(fetcher.settings.category_delay_seconds)
        try:
            found = 0
            current_url: str | None = category_url
            page_number = 1
            while current_url is not None and page_number <= fetcher.max_pages_per_category:
                soup = fetcher.get_soup(current_url)
                refs = parse_listing(soup, current_url)
                new_refs = [ref for ref in refs if ref.url not in seen_urls]
                for ref in new_refs:
                    seen_urls.add(ref.url)
                    found += 1
                    yield ref
                if not new_refs:
                    break

                following = next_page_url(soup, current_url, page_number)
                if following is None or urldefrag(following)[0] == urldefrag(current_url)[0]:
                    break
                current_url = following
                page_number += 1
                fetcher.pause(fetcher.settings.page_delay_seconds)

            log_event(
                logger,
                logging.INFO,
                "category_scraped",
                site=site.key,
                category_url=category_url,
                products_found=found,
            )
        except Exception as exc:
            category_errors.append(f"{category_url}: {exc}")
            fetcher.category_errors.append(category_errors[-1])
            log_event(
                logger,
                logging.ERROR,
                "category_scrape_failed",
                site=site.key,
                category_url=category_url,
                error=str(exc),
            )

    if site.category_urls and len(category_errors) == len(site.category_urls):
        raise ListDiscoveryError(
            f"All {len(category_errors)} categories failed for {site.source_name}: "
            + "; ".join(category_errors[:3])
        )
