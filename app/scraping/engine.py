"""
Product scraping engine.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Sequence
from urllib.parse import urlparse

from app.deduplication.write_time import WriteTimeDeduplicator
from app.domain.product import ProductRecord, ProductRef, RawProduct
from app.domain.product_scraping import ItemResult, RunMode, RunState, ScrapeResult
from app.errors import ProductNotFoundError
from app.logging_utils import log_event
from app.proxy.relay import ProxiedFetchRelay
from app.proxy.resolver import ProxyDecision, get_proxy_decision
from app.scraping.base import PageFetcher, SiteAdapter
from app.scraping.config import load_site_definitions
from app.scraping.config.models import ProductScrapingSettings, SiteDefinition
from app.scraping.rate_limiter import DomainRateLimiter
from app.scraping.registry import ScraperRegistry, select_site, site_for_url
from app.storage.base import ProductFilter, ProductStore, SortOrder

logger = logging.getLogger(__name__)


class ProductScrapingEngine:
    """
    Orchestrates site scraping runs and persistence.

    Runs are sequential. Per-item failures are recorded on the result and
    never abort the run.
    """

    def __init__(
        self,
        *,
        settings: ProductScrapingSettings,
        store: ProductStore,
        registry: ScraperRegistry | None = None,
        relay: ProxiedFetchRelay | None = None,
        proxy_decision: ProxyDecision | None = None,
        sites: Sequence[SiteDefinition] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout_seconds: float | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._registry = registry or ScraperRegistry()
        self._relay = relay or ProxiedFetchRelay(
            timeout_seconds=settings.timeout_seconds,
            user_agent=settings.user_agent,
        )
        self._proxy_decision = proxy_decision if proxy_decision is not None else get_proxy_decision()
        self._sites = list(sites) if sites is not None else None
        self._sleep = sleep
        self._timeout_seconds = timeout_seconds
        self._rate_limiter = DomainRateLimiter(
            default_rate_limit_per_second=settings.default_rate_limit_per_second,
            sleep=sleep,
        )
        self._deduplicator = WriteTimeDeduplicator(store)

    @property
    def sites(self) -> list[SiteDefinition]:
        if self._sites is None:
            self._sites = load_site_definitions(config_path=self._settings.sites_config_path)
        return self._sites

    @property
    def proxy_used(self) -> bool:
        return self._proxy_decision.enabled

    def create_adapter(self, site: SiteDefinition) -> SiteAdapter:
        return self._registry.create_adapter(site=site, fetcher=self._create_fetcher(site))

    def _create_fetcher(self, site: SiteDefinition) -> PageFetcher:
        return PageFetcher(
            site=site,
            settings=self._settings,
            relay=self._relay,
            proxy_decision=self._proxy_decision,
            rate_limiter=self._rate_limiter,
            sleep=self._sleep,
            timeout_seconds=self._timeout_seconds,
        )

    def run_full_catalog(self, source: str) -> ScrapeResult:
        """
        Scrape every listed product of one site and insert the new ones.

        Raises ValueError for an unknown source; everything else is reported
        on the returned result.
        """

        site = select_site(self.sites, source)
        fetcher = self._create_fetcher(site)
        adapter = self._registry.create_adapter(site=site, fetcher=fetcher)
        run_id = uuid.uuid4().hex[:12]
        result = ScrapeResult(source=site.source_name, mode=RunMode.FULL_CATALOG, proxy_used=self.proxy_used)
        self._log_run_started(run_id=run_id, source=site.key, mode=RunMode.FULL_CATALOG)

        self._transition(run_id, RunState.LIST_DISCOVERY, source=site.key)
        try:
            refs = list(adapter.list_products())
        except Exception as exc:
            result.errors.append(f"List discovery failed: {exc}")
            return self._finish(run_id, result, failed=True)

        result.total_found = len(refs)
        result.errors.extend(f"Category listing failed: {error}" for error in fetcher.category_errors)
        if not refs:
            result.errors.append(f"No products discovered for {site.source_name}")
            return self._finish(run_id, result, failed=True)

        for ref in refs:
            try:
                self._transition(run_id, RunState.DETAIL_FETCH, url=ref.url, level=logging.DEBUG)
                raw = adapter.fetch_detail(ref)

                self._transition(run_id, RunState.NORMALIZE, url=ref.url, level=logging.DEBUG)
                record = normalize_product(site, raw)

                self._transition(run_id, RunState.PERSIST, url=ref.url, level=logging.DEBUG)
                if self._deduplicator.is_duplicate(record):
                    result.skipped_count += 1
                    continue
                self._store.insert(record)
                result.saved_count += 1
            except Exception as exc:
                result.failed_count += 1
                result.errors.append(f"{ref.url}: {exc}")
                log_event(
                    logger,
                    logging.WARNING,
                    "product_item_failed",
                    run_id=run_id,
                    state=RunState.FAILED.value,
                    url=ref.url,
                    error=str(exc),
                )

        all_failed = result.failed_count == result.total_found
        return self._finish(run_id, result, failed=all_failed)

    def refresh_favorites(self) -> ScrapeResult:
        """
        Re-scrape every favorite that has a source URL, newest first.
        """

        try:
            favorites = self._store.query(
                ProductFilter(is_favorite=True, has_source_url=True, order=SortOrder.CREATED_DESC)
            )
        except Exception as exc:
            result = ScrapeResult(source="favorites", mode=RunMode.TARGETED, proxy_used=self.proxy_used)
            result.errors.append(f"Failed to load favorites: {exc}")
            log_event(logger, logging.ERROR, "favorites_load_failed", error=str(exc))
            return result
        return self.run_targeted(favorites, source="favorites")

    def run_targeted(self, records: Sequence[ProductRecord], *, source: str = "targeted") -> ScrapeResult:
        """
        Refresh price fields of existing records in place.

        `price` and `image_url` are only written when scraped; `sale_price`
        is always written so a finished sale is cleared.
        """

        run_id = uuid.uuid4().hex[:12]
        result = ScrapeResult(source=source, mode=RunMode.TARGETED, proxy_used=self.proxy_used)
        result.total_found = len(records)
        self._log_run_started(run_id=run_id, source=source, mode=RunMode.TARGETED)
        if not records:
            result.success = True
            self._transition(run_id, RunState.DONE, source=source)
            return result

        adapters: dict[str, SiteAdapter] = {}
        for index, record in enumerate(records):
            if index > 0:
                self._pause(self._settings.favorite_item_delay_seconds)
            item_id = str(record.id)
            try:
                updated_fields = self._refresh_one(run_id, record, adapters)
            except Exception as exc:
                result.failed_count += 1
                result.errors.append(f"{record.source_url or record.name}: {exc}")
                result.results.append(ItemResult(item_id=item_id, name=record.name, success=False, error=str(exc)))
                log_event(
                    logger,
                    logging.WARNING,
                    "product_item_failed",
                    run_id=run_id,
                    state=RunState.FAILED.value,
                    product_id=item_id,
                    url=record.source_url,
                    error=str(exc),
                )
                continue

            result.updated_count += 1
            result.results.append(
                ItemResult(item_id=item_id, name=record.name, success=True, updated_fields=updated_fields)
            )

        return self._finish(run_id, result, failed=result.updated_count == 0)

    def _refresh_one(
        self,
        run_id: str,
        record: ProductRecord,
        adapters: dict[str, SiteAdapter],
    ) -> dict[str, object]:
        if record.id is None:
            raise ValueError("Product has no id")
        if not record.source_url:
            raise ValueError("Product has no source URL")

        site = site_for_url(self.sites, record.source_url)
        if site is None:
            host = urlparse(record.source_url).hostname or record.source_url
            raise ValueError(f"Unsupported shop host: {host}")
        adapter = adapters.get(site.key)
        if adapter is None:
            adapter = self.create_adapter(site)
            adapters[site.key] = adapter

        self._transition(run_id, RunState.DETAIL_FETCH, url=record.source_url, level=logging.DEBUG)
        raw = adapter.fetch_detail(ProductRef(url=record.source_url, name=record.name))
        if not raw.has_price:
            raise ValueError("No price data found on product page")

        self._transition(run_id, RunState.PERSIST, url=record.source_url, level=logging.DEBUG)
        updates: dict[str, object] = {"sale_price": raw.sale_price}
        if raw.price is not None:
            updates["price"] = raw.price
        if raw.image_url:
            updates["image_url"] = raw.image_url
        if not self._store.update(record.id, updates):
            raise ProductNotFoundError(f"Product {record.id} no longer exists")
        return updates

    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)

    def _log_run_started(self, *, run_id: str, source: str, mode: RunMode) -> None:
        log_event(
            logger,
            logging.INFO,
            "product_scrape_started",
            run_id=run_id,
            source=source,
            mode=mode.value,
            proxy_enabled=self._proxy_decision.enabled,
        )

    @staticmethod
    def _transition(run_id: str, state: RunState, *, level: int = logging.INFO, **fields: object) -> None:
        log_event(logger, level, "run_state", run_id=run_id, state=state.value, **fields)

    def _finish(self, run_id: str, result: ScrapeResult, *, failed: bool) -> ScrapeResult:
        result.success = not failed
        state = RunState.FAILED if failed else RunState.DONE
        log_event(
            logger,
            logging.ERROR if failed else logging.INFO,
            "product_scrape_completed",
            run_id=run_id,
            state=state.value,
            source=result.source,
            mode=result.mode.value,
            total_found=result.total_found,
            saved=result.saved_count,
            skipped=result.skipped_count,
            updated=result.updated_count,
            failed=result.failed_count,
            proxy_enabled=result.proxy_used,
        )
        return result


def normalize_product(site: SiteDefinition, raw: RawProduct) -> ProductRecord:
    """
    Map adapter output onto a store record stamped with the site's labels.
    """

    name = " ".join(raw.name.split())
    if not name:
        raise ValueError("Product name is empty")
    return ProductRecord(
        source_type=site.source_type,
        source_name=site.source_name,
        name=name,
        price=raw.price,
        sale_price=raw.sale_price or None,
        image_url=raw.image_url or None,
        source_url=raw.product_url or None,
        asin=raw.asin or None,
    )
