"""
Config helpers for product scraping.
"""

from app.scraping.config.loader import get_product_scraping_settings, load_site_definitions
from app.scraping.config.models import ProductScrapingSettings, SiteDefinition

__all__ = [
    "ProductScrapingSettings",
    "SiteDefinition",
    "get_product_scraping_settings",
    "load_site_definitions",
]
