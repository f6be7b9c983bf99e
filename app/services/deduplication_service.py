"""
app/services/deduplication_service.py

Service wrapper for the maintenance dedup pass.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.orm import Session

from app.deduplication import MaintenanceDeduplicator
from app.domain.deduplication import DedupOutcome
from app.storage import SQLAlchemyProductStore


class DeduplicationService:
    """
    Removes duplicate products, keeping the oldest of each identity key.
    """

    def cleanup(self, *, db: Session, scope: str | None = None) -> DedupOutcome:
        store = SQLAlchemyProductStore(session=db)
        return MaintenanceDeduplicator(store).deduplicate(scope=scope)


@lru_cache(maxsize=1)
def get_deduplication_service() -> DeduplicationService:
    return DeduplicationService()
