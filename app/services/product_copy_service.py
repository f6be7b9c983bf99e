"""
app/services/product_copy_service.py

Manual product copies.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from functools import lru_cache

from sqlalchemy.orm import Session

from app.domain.product import ProductRecord
from app.errors import ProductNotFoundError
from app.storage import ProductStore, SQLAlchemyProductStore


class ProductCopyService:
    """
    Duplicates a product as a manual copy detached from its ASIN.

    Every copy points at the root original, also when copying a copy.
    """

    def copy_with_store(
        self,
        *,
        store: ProductStore,
        product_id: uuid.UUID,
    ) -> tuple[ProductRecord, ProductRecord]:
        """
        Return `(source, copy)`. Raises ProductNotFoundError for unknown ids.
        """

        source = store.get(product_id)
        if source is None:
            raise ProductNotFoundError(f"Product {product_id} not found")

        root_id = source.original_product_id or source.id
        draft = replace(
            source,
            id=uuid.uuid4(),
            asin=None,
            original_product_id=root_id,
            is_favorite=False,
            is_hidden=False,
            memo=None,
            created_at=None,
            updated_at=None,
        )
        return source, store.insert(draft)

    def copy(self, *, db: Session, product_id: uuid.UUID) -> tuple[ProductRecord, ProductRecord]:
        return self.copy_with_store(store=SQLAlchemyProductStore(session=db), product_id=product_id)


@lru_cache(maxsize=1)
def get_product_copy_service() -> ProductCopyService:
    return ProductCopyService()
