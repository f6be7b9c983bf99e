"""
Shared in-memory fakes for the product ingest tests.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from app.domain.product import ProductRecord
from app.errors import StoreError, UpstreamStatusError
from app.proxy.relay import RelayedAsset, guess_content_type
from app.proxy.resolver import ProxyDecision
from app.scraping.config.models import ProductScrapingSettings, SiteDefinition
from app.storage.base import DeleteResult, ProductFilter, ProductStore, SortOrder

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemoryProductStore(ProductStore):
    """
    ProductStore keeping records in a dict. Failure hooks simulate store errors.
    """

    def __init__(self, records: Sequence[ProductRecord] = ()) -> None:
        self.records: dict[uuid.UUID, ProductRecord] = {}
        self.insert_calls = 0
        self.insert_many_calls = 0
        self.delete_calls: list[list[uuid.UUID]] = []
        self.fail_query = False
        self.fail_insert: Callable[[ProductRecord], bool] | None = None
        self.fail_delete_ids: set[uuid.UUID] = set()
        self._sequence = 0
        for record in records:
            self._store(record)

    def _store(self, record: ProductRecord) -> ProductRecord:
        self._sequence += 1
        stored = replace(
            record,
            id=record.id or uuid.uuid4(),
            created_at=record.created_at or BASE_TIME + timedelta(seconds=self._sequence),
            updated_at=record.updated_at or record.created_at or BASE_TIME + timedelta(seconds=self._sequence),
        )
        if stored.id in self.records:
            raise StoreError(f"duplicate primary key {stored.id}")
        self.records[stored.id] = stored
        return stored

    def query(self, product_filter: ProductFilter) -> list[ProductRecord]:
        if self.fail_query:
            raise StoreError("query failed")
        matched = [record for record in self.records.values() if product_filter.matches(record)]
        matched.sort(
            key=lambda record: (record.created_at, str(record.id)),
            reverse=product_filter.order is SortOrder.CREATED_DESC,
        )
        matched = matched[product_filter.offset :]
        if product_filter.limit is not None:
            matched = matched[: product_filter.limit]
        return matched

    def count(self, product_filter: ProductFilter) -> int:
        return len([record for record in self.records.values() if product_filter.matches(record)])

    def insert(self, record: ProductRecord) -> ProductRecord:
        self.insert_calls += 1
        if self.fail_insert is not None and self.fail_insert(record):
            raise StoreError(f"insert rejected: {record.name}")
        return self._store(record)

    def update(self, product_id: uuid.UUID, fields: Mapping[str, Any]) -> bool:
        current = self.records.get(product_id)
        if current is None:
            return False
        self.records[product_id] = replace(current, **dict(fields))
        return True

    def delete_by_ids(self, ids: Sequence[uuid.UUID]) -> DeleteResult:
        self.delete_calls.append(list(ids))
        if self.fail_delete_ids.intersection(ids):
            return DeleteResult(deleted_count=0, error="delete rejected")
        deleted = 0
        for product_id in ids:
            if self.records.pop(product_id, None) is not None:
                deleted += 1
        return DeleteResult(deleted_count=deleted)

    def insert_many(self, records: Sequence[ProductRecord]) -> int:
        self.insert_many_calls += 1
        if self.fail_insert is not None and any(self.fail_insert(record) for record in records):
            raise StoreError("bulk insert rejected")
        for record in records:
            self._store(record)
        return len(records)


class StaticPageRelay:
    """
    Relay stand-in serving canned HTML keyed by URL (fragment ignored).
    """

    def __init__(self, pages: Mapping[str, str]) -> None:
        self.pages = dict(pages)
        self.requested: list[str] = []

    def fetch(
        self,
        target_url: str,
        decision: ProxyDecision,
        *,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RelayedAsset:
        self.requested.append(target_url)
        if target_url not in self.pages:
            raise UpstreamStatusError(f"404 for {target_url}", status_code=404, url=target_url)
        return RelayedAsset(
            url=target_url,
            content=self.pages[target_url].encode("utf-8"),
            content_type=guess_content_type(target_url),
            status_code=200,
            encoding="utf-8",
        )


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_record(
    name: str,
    *,
    source_type: str = "official",
    source_name: str = "DHC",
    asin: str | None = None,
    created_at: datetime | None = None,
    **fields: Any,
) -> ProductRecord:
    return ProductRecord(
        id=fields.pop("id", None) or uuid.uuid4(),
        source_type=source_type,
        source_name=source_name,
        name=name,
        asin=asin,
        created_at=created_at,
        **fields,
    )


def make_site(key: str = "dhc", **overrides: Any) -> SiteDefinition:
    defaults: dict[str, Any] = {
        "key": key,
        "adapter_type": key,
        "source_type": "official",
        "source_name": key.upper(),
        "base_url": f"https://www.{key}.example",
        "category_urls": [f"https://www.{key}.example/category/1"],
        "hosts": [f"{key}.example"],
    }
    defaults.update(overrides)
    return SiteDefinition(**defaults)


@pytest.fixture()
def scraping_settings(tmp_path) -> ProductScrapingSettings:
    return ProductScrapingSettings(
        sites_config_path=str(tmp_path / "sites.json"),
        user_agent="test-agent",
        timeout_seconds=5.0,
        default_rate_limit_per_second=100.0,
        max_pages_per_category=10,
        detail_delay_seconds=0.3,
        page_delay_seconds=0.5,
        category_delay_seconds=2.0,
        favorite_item_delay_seconds=2.0,
    )


@pytest.fixture()
def store() -> InMemoryProductStore:
    return InMemoryProductStore()


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()
