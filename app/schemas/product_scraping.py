"""
app/schemas/product_scraping.py

Request and response schemas for product scraping operations.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model serialized with camelCase keys; accepts either spelling on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScrapeRequest(CamelModel):
    """
    Optional body of a scrape trigger. `headless` is accepted and ignored.
    """

    headless: bool | None = None
    timeout: float | None = Field(default=None, gt=0, description="Request timeout in milliseconds")

    @property
    def timeout_seconds(self) -> float | None:
        return self.timeout / 1000.0 if self.timeout else None


class ScrapeRunData(CamelModel):
    total_products: int = Field(..., ge=0)
    saved_products: int = Field(..., ge=0)
    skipped_products: int = Field(..., ge=0)
    proxy_used: bool
    errors: list[str] | None = None


class ScrapeRunResponse(CamelModel):
    """
    API response model for one site scrape run.
    """

    success: bool
    message: str
    data: ScrapeRunData


class FavoriteItemResponse(CamelModel):
    product_id: str
    product_name: str
    success: bool
    error: str | None = None
    updated_fields: dict[str, Any] = Field(default_factory=dict)


class FavoritesRunData(CamelModel):
    total_products: int = Field(..., ge=0)
    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)
    results: list[FavoriteItemResponse] = Field(default_factory=list)
    proxy_used: bool


class FavoritesRunResponse(CamelModel):
    """
    API response model for a favorites refresh.
    """

    success: bool
    message: str
    data: FavoritesRunData
