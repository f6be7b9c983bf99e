"""
app/errors.py

Exception taxonomy shared by the fetch, scrape, dedup and restore layers.
"""

from __future__ import annotations


class ProductIngestError(Exception):
    """Base exception for product ingestion failures."""


class ConfigurationError(ProductIngestError):
    """Raised when a required configuration value is missing or invalid."""


class TransportError(ProductIngestError):
    """Raised when a target or proxy cannot be reached (network, DNS, timeout)."""


class UpstreamStatusError(ProductIngestError):
    """
    Raised when an upstream site answers with a non-2xx status.
    """

    def __init__(self, message: str, *, status_code: int, url: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class StoreError(ProductIngestError):
    """Raised when a product store read or write fails."""


class ListDiscoveryError(ProductIngestError):
    """Raised when a site adapter cannot enumerate any product."""


class ProductNotFoundError(ProductIngestError):
    """Raised when a referenced product does not exist."""
