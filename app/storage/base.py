"""
Storage layer interfaces for product listings.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.domain.product import IdentityKey, ProductRecord


class SortOrder(str, Enum):
    CREATED_ASC = "created_asc"
    CREATED_DESC = "created_desc"


@dataclass(frozen=True)
class ProductFilter:
    """
    Query filter understood by every ProductStore.

    `asin` is only applied when `match_asin` is true; in that case `None`
    means "ASIN IS NULL" rather than "any ASIN".
    """

    source_type: str | None = None
    source_name: str | None = None
    name: str | None = None
    asin: str | None = None
    match_asin: bool = False
    is_favorite: bool | None = None
    has_source_url: bool | None = None
    exclude_copies: bool = False
    order: SortOrder = SortOrder.CREATED_ASC
    limit: int | None = None
    offset: int = 0

    @classmethod
    def for_identity(cls, key: IdentityKey) -> "ProductFilter":
        return cls(
            source_type=key.source_type,
            source_name=key.source_name,
            name=key.name,
            asin=key.asin,
            match_asin=True,
            exclude_copies=True,
        )

    def matches(self, record: ProductRecord) -> bool:
        """
        Evaluate the filter against one record in memory.
        """

        if self.source_type is not None and record.source_type != self.source_type:
            return False
        if self.source_name is not None and record.source_name != self.source_name:
            return False
        if self.name is not None and record.name != self.name:
            return False
        if self.match_asin and record.asin != self.asin:
            return False
        if self.is_favorite is not None and record.is_favorite != self.is_favorite:
            return False
        if self.has_source_url is not None and (record.source_url is not None) != self.has_source_url:
            return False
        if self.exclude_copies and record.is_manual_copy:
            return False
        return True


@dataclass(frozen=True)
class DeleteResult:
    deleted_count: int
    error: str | None = None


class ProductStore(ABC):
    """
    CRUD interface over the shared product store.

    Each call is atomic on its own; no transaction spans several calls.
    """

    @abstractmethod
    def query(self, product_filter: ProductFilter) -> list[ProductRecord]:
        """
        Return records matching the filter in the filter's order.
        """

    @abstractmethod
    def insert(self, record: ProductRecord) -> ProductRecord:
        """
        Insert one record and return it with store-assigned fields.
        """

    @abstractmethod
    def update(self, product_id: uuid.UUID, fields: Mapping[str, Any]) -> bool:
        """
        Update selected fields; return False when the id does not exist.
        """

    @abstractmethod
    def delete_by_ids(self, ids: Sequence[uuid.UUID]) -> DeleteResult:
        """
        Delete every listed id in one call. Failures are reported, not raised.
        """

    @abstractmethod
    def count(self, product_filter: ProductFilter) -> int:
        """
        Count records matching the filter.
        """

    @abstractmethod
    def insert_many(self, records: Sequence[ProductRecord]) -> int:
        """
        Insert all records atomically: either every row lands or none does.
        """

    def get(self, product_id: uuid.UUID) -> ProductRecord | None:
        for record in self.query(ProductFilter()):
            if record.id == product_id:
                return record
        return None
