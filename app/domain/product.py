"""
app/domain/product.py

Domain models for product listings and their identity.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

MANUAL_COPY_MEMO = "コピー商品"


class IdentityKey(NamedTuple):
    """
    Composite key defining logical product equality.

    Fields are compared exactly (case-sensitive, no whitespace folding).
    `asin=None` is its own bucket and never matches a non-null ASIN.
    """

    source_type: str
    source_name: str
    name: str
    asin: str | None

    def label(self) -> str:
        """
        Human-readable rendering for logs and error messages only.
        """

        return f"{self.source_type}-{self.source_name}-{self.name}-{self.asin or 'null'}"


@dataclass(frozen=True)
class ProductRecord:
    """
    One stored (or about to be stored) product listing.
    """

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
    id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def identity_key(self) -> IdentityKey:
        return IdentityKey(
            source_type=self.source_type,
            source_name=self.source_name,
            name=self.name,
            asin=self.asin,
        )

    @property
    def is_manual_copy(self) -> bool:
        """
        Manual copies never take part in duplicate grouping.
        """

        return self.original_product_id is not None or self.memo == MANUAL_COPY_MEMO


@dataclass(frozen=True)
class RawProduct:
    """
    Product fields as parsed by a site adapter, before normalization.
    """

    name: str
    product_url: str
    price: int | None = None
    sale_price: int | None = None
    image_url: str | None = None
    asin: str | None = None

    @property
    def has_price(self) -> bool:
        return self.price is not None or self.sale_price is not None


@dataclass(frozen=True)
class ProductRef:
    """
    Candidate product discovered on a listing page.

    `listing` carries whatever the listing page already exposed so adapters
    can skip the detail request when nothing is missing.
    """

    url: str
    name: str | None = None
    listing: RawProduct | None = None
