"""
Batch cleanup of already-persisted duplicate products.
"""

from __future__ import annotations

import logging

from app.domain.deduplication import DedupOutcome
from app.domain.product import IdentityKey, ProductRecord
from app.logging_utils import log_event
from app.storage.base import ProductFilter, ProductStore, SortOrder

logger = logging.getLogger(__name__)


class MaintenanceDeduplicator:
    """
    Keeps the earliest record of every identity key and deletes the rest.

    Manual copies are excluded from grouping, so they are never deleted and
    never count against their original.
    """

    def __init__(self, store: ProductStore) -> None:
        self._store = store

    def deduplicate(self, scope: str | None = None) -> DedupOutcome:
        """
        Run one pass. `scope` limits the pass to a single source name.

        Never raises; failures are reported on the outcome.
        """

        normalized_scope = scope.strip() if scope and scope.strip() else None
        try:
            records = self._store.query(
                ProductFilter(
                    source_name=normalized_scope,
                    exclude_copies=True,
                    order=SortOrder.CREATED_ASC,
                )
            )
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "dedup_load_failed",
                scope=normalized_scope,
                error=str(exc),
            )
            return DedupOutcome(
                deleted_count=0,
                groups_processed=0,
                errors=[f"Failed to load products: {exc}"],
                completed=False,
            )

        groups = group_by_identity(records)
        deleted_count = 0
        groups_processed = 0
        errors: list[str] = []

        for key, members in groups.items():
            if len(members) < 2:
                continue
            groups_processed += 1
            keeper, *duplicates = members
            duplicate_ids = [record.id for record in duplicates if record.id is not None]
            if not duplicate_ids:
                continue

            try:
                result = self._store.delete_by_ids(duplicate_ids)
            except Exception as exc:
                result_error: str | None = str(exc)
                removed = 0
            else:
                result_error = result.error
                removed = result.deleted_count

            if result_error:
                errors.append(f"{key.label()} ({keeper.name}): {result_error}")
                log_event(
                    logger,
                    logging.WARNING,
                    "dedup_group_failed",
                    identity=key.label(),
                    duplicates=len(duplicate_ids),
                    error=result_error,
                )
                continue

            deleted_count += removed
            log_event(
                logger,
                logging.INFO,
                "dedup_group_cleaned",
                identity=key.label(),
                kept_id=keeper.id,
                deleted=removed,
            )

        log_event(
            logger,
            logging.INFO,
            "dedup_completed",
            scope=normalized_scope,
            records_scanned=len(records),
            groups_processed=groups_processed,
            deleted_count=deleted_count,
            errors=len(errors),
        )
        return DedupOutcome(deleted_count=deleted_count, groups_processed=groups_processed, errors=errors)


def group_by_identity(records: list[ProductRecord]) -> dict[IdentityKey, list[ProductRecord]]:
    """
    Group records by identity key, preserving input order within each group.
    """

    groups: dict[IdentityKey, list[ProductRecord]] = {}
    for record in records:
        if record.is_manual_copy:
            continue
        groups.setdefault(record.identity_key, []).append(record)
    return groups
