"""
app/api/routers/product_scraping.py

Site scrape triggers and the favorites refresh.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.domain.product_scraping import ScrapeResult
from app.schemas.product_scraping import (
    FavoriteItemResponse,
    FavoritesRunData,
    FavoritesRunResponse,
    ScrapeRequest,
    ScrapeRunData,
    ScrapeRunResponse,
)
from app.services.product_scraping_service import (
    ProductScrapingService,
    get_product_scraping_service,
)
from db.session import get_db

router = APIRouter(prefix="/scrape", tags=["product-scraping"])


# Registered before /{source} so "favorites" is not taken as a source name.
@router.post("/favorites", response_model=FavoritesRunResponse)
def refresh_favorites(
    db: Session = Depends(get_db),
    scraping_service: ProductScrapingService = Depends(get_product_scraping_service),
):
    """
    Re-scrape prices of every favorite product that has a source URL.
    """

    result = scraping_service.refresh_favorites(db=db)
    succeeded = sum(1 for item in result.results if item.success)
    failed = len(result.results) - succeeded
    if result.success:
        message = f"Favorites refresh completed (succeeded: {succeeded}, failed: {failed})"
    else:
        message = "Favorites refresh failed"

    response = FavoritesRunResponse(
        success=result.success,
        message=message,
        data=FavoritesRunData(
            total_products=result.total_found,
            success_count=succeeded,
            failure_count=max(failed, result.failed_count),
            results=[
                FavoriteItemResponse(
                    product_id=item.item_id,
                    product_name=item.name,
                    success=item.success,
                    error=item.error,
                    updated_fields=item.updated_fields,
                )
                for item in result.results
            ],
            proxy_used=result.proxy_used,
        ),
    )
    return _respond(response, succeeded=result.success)


@router.post("/{source}", response_model=ScrapeRunResponse)
def scrape_source(
    source: str,
    payload: ScrapeRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    scraping_service: ProductScrapingService = Depends(get_product_scraping_service),
):
    """
    Scrape one configured site and insert products not already stored.

    Completed runs return 200 even with item failures; failed runs return 500.
    """

    request = payload or ScrapeRequest()
    try:
        result = scraping_service.scrape_source(
            db=db,
            source=source,
            timeout_seconds=request.timeout_seconds,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return _respond(_scrape_response(result), succeeded=result.success)


def _scrape_response(result: ScrapeResult) -> ScrapeRunResponse:
    if result.success:
        message = f"{result.source} scraping completed"
    else:
        message = f"{result.source} scraping failed"
    return ScrapeRunResponse(
        success=result.success,
        message=message,
        data=ScrapeRunData(
            total_products=result.total_found,
            saved_products=result.saved_count,
            skipped_products=result.skipped_count,
            proxy_used=result.proxy_used,
            errors=result.errors or None,
        ),
    )


def _respond(response: ScrapeRunResponse | FavoritesRunResponse, *, succeeded: bool):
    if succeeded:
        return response
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json", by_alias=True),
    )
