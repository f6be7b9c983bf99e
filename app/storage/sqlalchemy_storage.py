"""
SQLAlchemy-backed product store.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.product import ProductRecord
from app.errors import StoreError
from app.repositories.product_repository import ProductRepository
from app.storage.base import DeleteResult, ProductFilter, ProductStore

logger = logging.getLogger(__name__)


class SQLAlchemyProductStore(ProductStore):
    """
    Product store over one DB session. Every call commits on its own.
    """

    def __init__(self, *, session: Session, batch_size: int = 500) -> None:
        self._session = session
        self._repository = ProductRepository(session)
        self._batch_size = max(1, batch_size)

    def query(self, product_filter: ProductFilter) -> list[ProductRecord]:
        try:
            rows = self._repository.find(product_filter)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Product query failed: {exc}") from exc
        return [ProductRepository.to_record(row) for row in rows]

    def count(self, product_filter: ProductFilter) -> int:
        try:
            return self._repository.count(product_filter)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Product count failed: {exc}") from exc

    def get(self, product_id: uuid.UUID) -> ProductRecord | None:
        try:
            row = self._repository.get(product_id)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Product lookup failed: {exc}") from exc
        return ProductRepository.to_record(row) if row is not None else None

    def insert(self, record: ProductRecord) -> ProductRecord:
        try:
            row = self._repository.add(record)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Product insert failed name={record.name!r}: {exc}") from exc
        return ProductRepository.to_record(row)

    def update(self, product_id: uuid.UUID, fields: Mapping[str, Any]) -> bool:
        try:
            updated = self._repository.update_fields(product_id, fields)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Product update failed id={product_id}: {exc}") from exc
        return updated

    def delete_by_ids(self, ids: Sequence[uuid.UUID]) -> DeleteResult:
        if not ids:
            return DeleteResult(deleted_count=0)
        try:
            deleted = self._repository.delete_ids(ids)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error("Product delete failed ids=%s error=%s", len(ids), exc)
            return DeleteResult(deleted_count=0, error=str(exc))
        return DeleteResult(deleted_count=deleted)

    def insert_many(self, records: Sequence[ProductRecord]) -> int:
        if not records:
            return 0
        try:
            inserted = self._repository.bulk_insert(records, batch_size=self._batch_size)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Bulk product insert failed rows={len(records)}: {exc}") from exc
        return inserted
