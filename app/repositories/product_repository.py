"""
app/repositories/product_repository.py

Persistence layer for product listing rows.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.product import MANUAL_COPY_MEMO, ProductRecord
from app.storage.base import ProductFilter, SortOrder
from db.models.product import Product

_DEFAULT_BATCH_SIZE = 500

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "price",
        "sale_price",
        "image_url",
        "source_url",
        "asin",
        "is_hidden",
        "is_favorite",
        "memo",
    }
)


class ProductRepository:
    """
    Repository for product rows. Callers own the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find(self, product_filter: ProductFilter) -> list[Product]:
        stmt = self._apply_filter(select(Product), product_filter)
        if product_filter.order is SortOrder.CREATED_DESC:
            stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc())
        else:
            stmt = stmt.order_by(Product.created_at.asc(), Product.id.asc())
        if product_filter.offset:
            stmt = stmt.offset(product_filter.offset)
        if product_filter.limit is not None:
            stmt = stmt.limit(product_filter.limit)
        return list(self._session.scalars(stmt).all())

    def count(self, product_filter: ProductFilter) -> int:
        stmt = self._apply_filter(select(func.count()).select_from(Product), product_filter)
        return int(self._session.scalar(stmt) or 0)

    def get(self, product_id: uuid.UUID) -> Product | None:
        return self._session.get(Product, product_id)

    def add(self, record: ProductRecord) -> Product:
        row = Product(**self._to_payload(record))
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return row

    def update_fields(self, product_id: uuid.UUID, fields: Mapping[str, Any]) -> bool:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        if not fields:
            return self.get(product_id) is not None

        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(**dict(fields))
            .returning(Product.id)
        )
        return self._session.scalar(stmt) is not None

    def delete_ids(self, ids: Sequence[uuid.UUID]) -> int:
        if not ids:
            return 0
        stmt = delete(Product).where(Product.id.in_(list(ids))).returning(Product.id)
        return len(self._session.scalars(stmt).all())

    def bulk_insert(
        self,
        records: Sequence[ProductRecord],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert rows with PostgreSQL multi-row INSERT statements.
        """

        if not records:
            return 0

        size = max(1, batch_size)
        now = datetime.now(timezone.utc)
        payloads = [self._to_payload(record) for record in records]
        for payload in payloads:
            # Multi-row VALUES needs the same column set on every row.
            payload.setdefault("created_at", now)
            payload.setdefault("updated_at", payload["created_at"])
        inserted = 0
        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            stmt = insert(Product).values(chunk).returning(Product.id)
            inserted += len(self._session.scalars(stmt).all())
        return inserted

    @staticmethod
    def to_record(row: Product) -> ProductRecord:
        return ProductRecord(
            id=row.id,
            source_type=row.source_type,
            source_name=row.source_name,
            name=row.name,
            price=row.price,
            sale_price=row.sale_price,
            image_url=row.image_url,
            source_url=row.source_url,
            asin=row.asin,
            is_hidden=row.is_hidden,
            is_favorite=row.is_favorite,
            memo=row.memo,
            original_product_id=row.original_product_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _to_payload(record: ProductRecord) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": record.id or uuid.uuid4(),
            "source_type": record.source_type,
            "source_name": record.source_name,
            "name": record.name,
            "price": record.price,
            "sale_price": record.sale_price,
            "image_url": record.image_url,
            "source_url": record.source_url,
            "asin": record.asin,
            "is_hidden": record.is_hidden,
            "is_favorite": record.is_favorite,
            "memo": record.memo,
            "original_product_id": record.original_product_id,
        }
        # Restored rows keep their timestamps so the keep-oldest rule survives a restore.
        if record.created_at is not None:
            payload["created_at"] = record.created_at
        if record.updated_at is not None:
            payload["updated_at"] = record.updated_at
        return payload

    @staticmethod
    def _apply_filter(stmt: Select, product_filter: ProductFilter) -> Select:
        if product_filter.source_type is not None:
            stmt = stmt.where(Product.source_type == product_filter.source_type)
        if product_filter.source_name is not None:
            stmt = stmt.where(Product.source_name == product_filter.source_name)
        if product_filter.name is not None:
            stmt = stmt.where(Product.name == product_filter.name)
        if product_filter.match_asin:
            if product_filter.asin is None:
                stmt = stmt.where(Product.asin.is_(None))
            else:
                stmt = stmt.where(Product.asin == product_filter.asin)
        if product_filter.is_favorite is not None:
            stmt = stmt.where(Product.is_favorite.is_(product_filter.is_favorite))
        if product_filter.has_source_url is True:
            stmt = stmt.where(Product.source_url.is_not(None))
        elif product_filter.has_source_url is False:
            stmt = stmt.where(Product.source_url.is_(None))
        if product_filter.exclude_copies:
            stmt = stmt.where(
                Product.original_product_id.is_(None),
                or_(Product.memo.is_(None), Product.memo != MANUAL_COPY_MEMO),
            )
        return stmt
