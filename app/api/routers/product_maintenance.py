"""
app/api/routers/product_maintenance.py

Duplicate cleanup and manual product copies.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.errors import ProductNotFoundError, StoreError
from app.schemas.product_maintenance import (
    CleanupDuplicatesData,
    CleanupDuplicatesRequest,
    CleanupDuplicatesResponse,
    CopyProductData,
    CopyProductRequest,
    CopyProductResponse,
    ProductResponse,
)
from app.services.deduplication_service import DeduplicationService, get_deduplication_service
from app.services.product_copy_service import ProductCopyService, get_product_copy_service
from db.session import get_db

router = APIRouter(prefix="/products", tags=["product-maintenance"])


@router.post("/cleanup-duplicates", response_model=CleanupDuplicatesResponse)
def cleanup_duplicates(
    payload: CleanupDuplicatesRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    dedup_service: DeduplicationService = Depends(get_deduplication_service),
):
    """
    Delete duplicate products, keeping the oldest record of each identity key.
    """

    request = payload or CleanupDuplicatesRequest()
    outcome = dedup_service.cleanup(db=db, scope=request.scope)
    response = CleanupDuplicatesResponse(
        success=outcome.completed,
        data=CleanupDuplicatesData(
            deleted_count=outcome.deleted_count,
            duplicate_groups=outcome.groups_processed,
            errors=outcome.errors,
        ),
    )
    if not outcome.completed:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode="json", by_alias=True),
        )
    return response


@router.post("/copy", response_model=CopyProductResponse)
def copy_product(
    payload: CopyProductRequest,
    db: Session = Depends(get_db),
    copy_service: ProductCopyService = Depends(get_product_copy_service),
) -> CopyProductResponse:
    """
    Duplicate a product as a manual copy without its ASIN.
    """

    try:
        source, copied = copy_service.copy(db=db, product_id=payload.product_id)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return CopyProductResponse(
        success=True,
        message="Product copied",
        data=CopyProductData(
            original_product_id=payload.product_id,
            copied_product_id=copied.id,
            copied_product=ProductResponse.from_record(copied),
        ),
    )
