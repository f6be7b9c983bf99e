"""
Environment + JSON config loader for product scraping.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from urllib.parse import urljoin

from db.config import load_env_files
from db.models.product import SourceType

from app.config import DEFAULT_USER_AGENT, TRUTHY_VALUES
from app.scraping.config.models import ProductScrapingSettings, SiteDefinition

DEFAULT_SITES_CONFIG_PATH = "app/scraping/config/sites.json"


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


@lru_cache(maxsize=1)
def get_product_scraping_settings() -> ProductScrapingSettings:
    """
    Return cached scraper settings from environment variables.
    """

    load_env_files()
    config_path = _get_str_env("PRODUCT_SCRAPE_SITES_CONFIG_PATH", DEFAULT_SITES_CONFIG_PATH)
    return ProductScrapingSettings(
        sites_config_path=str(_resolve_config_path(config_path)),
        user_agent=_get_str_env("PRODUCT_SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        timeout_seconds=max(1.0, _get_float_env("PRODUCT_SCRAPE_TIMEOUT_SECONDS", 30.0)),
        default_rate_limit_per_second=max(
            0.1,
            _get_float_env("PRODUCT_SCRAPE_RATE_LIMIT_PER_SECOND", 2.0),
        ),
        max_pages_per_category=max(1, _get_int_env("PRODUCT_SCRAPE_MAX_PAGES_PER_CATEGORY", 10)),
        detail_delay_seconds=max(0.0, _get_float_env("PRODUCT_SCRAPE_DETAIL_DELAY_SECONDS", 0.3)),
        page_delay_seconds=max(0.0, _get_float_env("PRODUCT_SCRAPE_PAGE_DELAY_SECONDS", 0.5)),
        category_delay_seconds=max(
            0.0,
            _get_float_env("PRODUCT_SCRAPE_CATEGORY_DELAY_SECONDS", 2.0),
        ),
        favorite_item_delay_seconds=max(
            0.0,
            _get_float_env("PRODUCT_SCRAPE_FAVORITE_DELAY_SECONDS", 2.0),
        ),
    )


def load_site_definitions(*, config_path: str) -> list[SiteDefinition]:
    """
    Load site definitions from a JSON file.

    Malformed entries are skipped rather than failing the whole file.
    """

    path = _resolve_config_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Site config file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    sites = raw_data.get("sites", [])
    if not isinstance(sites, list):
        raise ValueError("Invalid site config: 'sites' must be a list.")

    parsed: list[SiteDefinition] = []
    for entry in sites:
        if not isinstance(entry, dict):
            continue

        key = str(entry.get("key", "")).strip().lower()
        base_url = str(entry.get("base_url", "")).strip().rstrip("/")
        source_name = str(entry.get("source_name", "")).strip()
        if not key or not base_url or not source_name:
            continue

        parsed.append(
            SiteDefinition(
                key=key,
                adapter_type=str(entry.get("adapter_type", key)).strip().lower() or key,
                source_type=(
                    str(entry.get("source_type", SourceType.OFFICIAL)).strip().lower() or SourceType.OFFICIAL
                ),
                source_name=source_name,
                base_url=base_url,
                category_urls=_normalize_category_urls(
                    base_url=base_url,
                    urls=entry.get("category_urls", []),
                ),
                hosts=_normalize_hosts(entry.get("hosts", [])),
                enabled=_optional_bool(entry.get("enabled"), True),
                max_pages_per_category=_optional_int(entry.get("max_pages_per_category")),
                rate_limit_per_second=_optional_float(entry.get("rate_limit_per_second")),
                headers=_normalize_headers(entry.get("headers", {})),
                adapter_class=_optional_str(entry.get("adapter_class")),
            )
        )

    return parsed


def _normalize_category_urls(*, base_url: str, urls: object) -> list[str]:
    if not isinstance(urls, list):
        return []

    normalized: list[str] = []
    for value in urls:
        if not isinstance(value, str) or not value.strip():
            continue
        raw_url = value.strip()
        if raw_url.startswith(("http://", "https://")):
            normalized.append(raw_url)
        else:
            normalized.append(urljoin(f"{base_url}/", raw_url.lstrip("/")))
    return normalized


def _normalize_hosts(hosts: object) -> list[str]:
    if isinstance(hosts, str):
        hosts = [hosts]
    if not isinstance(hosts, list):
        return []
    return [item.strip().lower() for item in hosts if isinstance(item, str) and item.strip()]


def _normalize_headers(headers: object) -> dict[str, str]:
    if not isinstance(headers, dict):
        return {}

    normalized: dict[str, str] = {}
    for key, value in headers.items():
        if not isinstance(key, str) or not isinstance(value, str):
            continue
        if key.strip() and value.strip():
            normalized[key.strip()] = value.strip()
    return normalized


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUTHY_VALUES:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
