"""
Duplicate check performed during ingestion, before insert.
"""

from __future__ import annotations

from app.domain.product import ProductRecord
from app.storage.base import ProductFilter, ProductStore


class WriteTimeDeduplicator:
    """
    Answers "does a record with this identity key already exist?".

    One store count per candidate. The check and the following insert are two
    separate calls, so concurrent runs can still race; the maintenance pass
    cleans that up.
    """

    def __init__(self, store: ProductStore) -> None:
        self._store = store

    def is_duplicate(self, candidate: ProductRecord) -> bool:
        """
        Raises StoreError when the lookup fails.
        """

        return self._store.count(ProductFilter.for_identity(candidate.identity_key)) > 0
