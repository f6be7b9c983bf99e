"""
app/schemas/product_maintenance.py

Request and response schemas for product maintenance operations.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from app.domain.product import ProductRecord
from app.schemas.product_scraping import CamelModel


class CleanupDuplicatesRequest(CamelModel):
    scope: str | None = Field(default=None, description="Optional source name to limit the pass to")


class CleanupDuplicatesData(CamelModel):
    deleted_count: int = Field(..., ge=0)
    duplicate_groups: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)


class CleanupDuplicatesResponse(CamelModel):
    """
    API response model for a maintenance dedup pass.
    """

    success: bool
    data: CleanupDuplicatesData


class CopyProductRequest(CamelModel):
    product_id: uuid.UUID


class ProductResponse(CamelModel):
    id: uuid.UUID | None
    source_type: str
    source_name: str
    name: str
    price: int | None = None
    sale_price: int | None = None
    image_url: str | None = None
    source_url: str | None = None
    asin: str | None = None
    is_hidden: bool = False
    is_favorite: bool = False
    memo: str | None = None
    original_product_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductResponse":
        return cls(
            id=record.id,
            source_type=record.source_type,
            source_name=record.source_name,
            name=record.name,
            price=record.price,
            sale_price=record.sale_price,
            image_url=record.image_url,
            source_url=record.source_url,
            asin=record.asin,
            is_hidden=record.is_hidden,
            is_favorite=record.is_favorite,
            memo=record.memo,
            original_product_id=record.original_product_id,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class CopyProductData(CamelModel):
    original_product_id: uuid.UUID
    copied_product_id: uuid.UUID | None
    copied_product: ProductResponse


class CopyProductResponse(CamelModel):
    """
    API response model for a manual product copy.
    """

    success: bool
    message: str
    data: CopyProductData
