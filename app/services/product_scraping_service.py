"""
app/services/product_scraping_service.py

Service orchestration for product scraping runs.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.orm import Session

from app.domain.product_scraping import ScrapeResult
from app.scraping.config import get_product_scraping_settings
from app.scraping.engine import ProductScrapingEngine
from app.storage import SQLAlchemyProductStore


class ProductScrapingService:
    """
    Runs site scrapes and favorites refreshes against the product store.
    """

    def __init__(self) -> None:
        self._settings = get_product_scraping_settings()

    def scrape_source(
        self,
        *,
        db: Session,
        source: str,
        timeout_seconds: float | None = None,
    ) -> ScrapeResult:
        """
        Raises ValueError for an unknown source.
        """

        return self._build_engine(db=db, timeout_seconds=timeout_seconds).run_full_catalog(source)

    def refresh_favorites(self, *, db: Session) -> ScrapeResult:
        return self._build_engine(db=db).refresh_favorites()

    def _build_engine(self, *, db: Session, timeout_seconds: float | None = None) -> ProductScrapingEngine:
        store = SQLAlchemyProductStore(session=db)
        return ProductScrapingEngine(
            settings=self._settings,
            store=store,
            timeout_seconds=timeout_seconds,
        )


@lru_cache(maxsize=1)
def get_product_scraping_service() -> ProductScrapingService:
    """
    Build and cache product scraping service.
    """

    return ProductScrapingService()
