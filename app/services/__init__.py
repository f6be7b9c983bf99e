"""
app/services package marker.
"""

from app.services.deduplication_service import DeduplicationService, get_deduplication_service
from app.services.image_relay_service import ImageRelayService, get_image_relay_service
from app.services.product_copy_service import ProductCopyService, get_product_copy_service
from app.services.product_scraping_service import (
    ProductScrapingService,
    get_product_scraping_service,
)

__all__ = [
    "DeduplicationService",
    "get_deduplication_service",
    "ImageRelayService",
    "get_image_relay_service",
    "ProductCopyService",
    "get_product_copy_service",
    "ProductScrapingService",
    "get_product_scraping_service",
]
