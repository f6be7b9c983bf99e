"""
Site adapter registry and factory.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import urlparse

from app.scraping.base import PageFetcher, SiteAdapter
from app.scraping.config.models import SiteDefinition
from app.scraping.sites import DHCAdapter, InnisfreeAdapter, VTCosmeticsAdapter


class ScraperRegistry:
    """
    Adapter registry supporting built-ins and dynamic import paths.
    """

    def __init__(self, registrations: Mapping[str, type[Any]] | None = None) -> None:
        builtins: dict[str, type[Any]] = {
            "dhc": DHCAdapter,
            "vt": VTCosmeticsAdapter,
            "innisfree": InnisfreeAdapter,
        }
        if registrations:
            builtins.update({key.strip().lower(): value for key, value in registrations.items()})
        self._registrations = builtins

    def register(self, *, adapter_type: str, adapter_class: type[Any]) -> None:
        self._registrations[adapter_type.strip().lower()] = adapter_class

    @property
    def adapter_types(self) -> list[str]:
        return sorted(self._registrations)

    def create_adapter(self, *, site: SiteDefinition, fetcher: PageFetcher) -> SiteAdapter:
        adapter_class = self._resolve_adapter_class(site)
        adapter = adapter_class(site=site, fetcher=fetcher)
        if not isinstance(adapter, SiteAdapter):
            raise ValueError(
                f"Adapter '{adapter_class.__name__}' for site='{site.key}' must define "
                "list_products() and fetch_detail()."
            )
        return adapter

    def _resolve_adapter_class(self, site: SiteDefinition) -> type[Any]:
        if site.adapter_class:
            return self._load_dynamic_class(site.adapter_class)

        resolved = self._registrations.get(site.adapter_type)
        if resolved is None:
            allowed = ", ".join(self.adapter_types)
            raise ValueError(
                f"Unknown adapter_type='{site.adapter_type}' for site='{site.key}'. "
                f"Allowed types: {allowed}."
            )
        return resolved

    @staticmethod
    def _load_dynamic_class(path: str) -> type[Any]:
        if ":" not in path:
            raise ValueError(f"Invalid adapter_class '{path}'. Use 'module.path:ClassName'.")

        module_path, class_name = path.split(":", 1)
        module = importlib.import_module(module_path)
        loaded = getattr(module, class_name, None)
        if loaded is None:
            raise ValueError(f"Unable to resolve adapter class '{path}'.")
        if not isinstance(loaded, type):
            raise ValueError(f"'{path}' must be a class.")
        return loaded


def select_site(sites: Sequence[SiteDefinition], source: str) -> SiteDefinition:
    """
    Find an enabled site by key or display name (case-insensitive).
    """

    normalized = source.strip().lower()
    for site in sites:
        if not site.enabled:
            continue
        if normalized in {site.key, site.source_name.lower()}:
            return site
    known = ", ".join(sorted(site.key for site in sites if site.enabled))
    raise ValueError(f"Unknown source '{source}'. Known sources: {known}.")


def site_for_url(sites: Sequence[SiteDefinition], url: str) -> SiteDefinition | None:
    """
    Find the enabled site whose hosts own `url`.
    """

    host = urlparse(url).hostname or ""
    if not host:
        return None
    for site in sites:
        if site.enabled and site.owns_host(host):
            return site
    return None
