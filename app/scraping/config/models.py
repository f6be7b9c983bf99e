"""
Scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SiteDefinition:
    """
    One retail site that can be scraped.

    `source_type` and `source_name` are stamped on every normalized record.
    """

    key: str
    adapter_type: str
    source_type: str
    source_name: str
    base_url: str
    category_urls: list[str]
    hosts: list[str] = field(default_factory=list)
    enabled: bool = True
    max_pages_per_category: int | None = None
    rate_limit_per_second: float | None = None
    headers: dict[str, str] = field(default_factory=dict)
    adapter_class: str | None = None

    def owns_host(self, host: str) -> bool:
        normalized = host.lower()
        return any(normalized == item or normalized.endswith(f".{item}") for item in self.hosts)


@dataclass(frozen=True)
class ProductScrapingSettings:
    """
    Runtime settings for product scraping.
    """

    sites_config_path: str
    user_agent: str
    timeout_seconds: float
    default_rate_limit_per_second: float
    max_pages_per_category: int
    detail_delay_seconds: float
    page_delay_seconds: float
    category_delay_seconds: float
    favorite_item_delay_seconds: float
