"""
app/api/routers package marker.
"""

from app.api.routers.image_proxy import router as image_proxy_router
from app.api.routers.product_maintenance import router as product_maintenance_router
from app.api.routers.product_scraping import router as product_scraping_router

__all__ = [
    "image_proxy_router",
    "product_maintenance_router",
    "product_scraping_router",
]
