"""
app/schemas package marker.
"""

from app.schemas.product_maintenance import (
    CleanupDuplicatesData,
    CleanupDuplicatesRequest,
    CleanupDuplicatesResponse,
    CopyProductData,
    CopyProductRequest,
    CopyProductResponse,
    ProductResponse,
)
from app.schemas.product_scraping import (
    FavoriteItemResponse,
    FavoritesRunData,
    FavoritesRunResponse,
    ScrapeRequest,
    ScrapeRunData,
    ScrapeRunResponse,
)

__all__ = [
    "CleanupDuplicatesData",
    "CleanupDuplicatesRequest",
    "CleanupDuplicatesResponse",
    "CopyProductData",
    "CopyProductRequest",
    "CopyProductResponse",
    "FavoriteItemResponse",
    "FavoritesRunData",
    "FavoritesRunResponse",
    "ProductResponse",
    "ScrapeRequest",
    "ScrapeRunData",
    "ScrapeRunResponse",
]
