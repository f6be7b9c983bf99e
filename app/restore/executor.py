"""
Tiered batch executor for bulk restores.

Tier 1 writes everything in one atomic bulk call. When that fails, tier 2
writes fixed-size batches with a pause between them, and tier 3 retries the
items of each failed batch one by one. Applied work is never rolled back.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import Generic, TypeVar

from sqlalchemy import Engine

from app.domain.product import ProductRecord
from app.domain.restore import BatchExecutionResult, ExecutionTier
from app.logging_utils import log_event
from app.storage.base import ProductStore

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")


class BatchWriter(ABC, Generic[ItemT]):
    """
    Destination for restored items.

    `supports_bulk` declares whether `write_bulk` is available; writers
    without it go straight to per-item writes.
    """

    supports_bulk: bool = False

    def write_bulk(self, items: Sequence[ItemT]) -> int:
        """
        Write all items atomically and return how many landed.
        """

        raise NotImplementedError(f"{type(self).__name__} has no bulk capability")

    @abstractmethod
    def write_one(self, item: ItemT) -> None:
        """
        Write a single item.
        """

    def describe(self, item: ItemT) -> str:
        return repr(item)[:120]


class ProductRecordWriter(BatchWriter[ProductRecord]):
    """
    Writes ProductRecords through the product store.
    """

    supports_bulk = True

    def __init__(self, store: ProductStore) -> None:
        self._store = store

    def write_bulk(self, items: Sequence[ProductRecord]) -> int:
        return self._store.insert_many(items)

    def write_one(self, item: ProductRecord) -> None:
        self._store.insert(item)

    def describe(self, item: ProductRecord) -> str:
        return f"{item.id or '-'} {item.identity_key.label()}"


class SQLStatementWriter(BatchWriter[str]):
    """
    Executes raw SQL statements; a bulk call runs in one transaction.
    """

    supports_bulk = True

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def write_bulk(self, items: Sequence[str]) -> int:
        with self._engine.begin() as connection:
            for statement in items:
                connection.exec_driver_sql(statement)
        return len(items)

    def write_one(self, item: str) -> None:
        with self._engine.begin() as connection:
            connection.exec_driver_sql(item)

    def describe(self, item: str) -> str:
        compact = " ".join(item.split())
        return compact[:120]


class TieredBatchExecutor(Generic[ItemT]):
    """
    Runs bulk, then batched, then single-item writes. Never raises.
    """

    def __init__(
        self,
        writer: BatchWriter[ItemT],
        *,
        batch_size: int = 100,
        batch_delay_seconds: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._writer = writer
        self._batch_size = max(1, batch_size)
        self._batch_delay_seconds = max(0.0, batch_delay_seconds)
        self._sleep = sleep

    def execute(self, items: Iterable[ItemT]) -> BatchExecutionResult:
        pending = list(items)
        total = len(pending)
        if total == 0:
            return BatchExecutionResult(total_items=0, inserted_count=0, tier=ExecutionTier.BULK)

        if not self._writer.supports_bulk:
            inserted, errors = self._write_each(pending)
            return self._finish(
                BatchExecutionResult(
                    total_items=total,
                    inserted_count=inserted,
                    tier=ExecutionTier.SINGLE,
                    errors=errors,
                    degradations=["writer has no bulk capability; writing items one by one"],
                )
            )

        try:
            inserted = self._writer.write_bulk(pending)
        except Exception as exc:
            bulk_error = str(exc)
        else:
            return self._finish(
                BatchExecutionResult(total_items=total, inserted_count=inserted, tier=ExecutionTier.BULK)
            )

        degradations = [f"bulk write of {total} items failed: {bulk_error}"]
        log_event(logger, logging.WARNING, "restore_bulk_failed", items=total, error=bulk_error)

        errors: list[str] = []
        inserted = 0
        tier = ExecutionTier.BATCHED
        batches = [pending[start : start + self._batch_size] for start in range(0, total, self._batch_size)]
        for index, batch in enumerate(batches, start=1):
            if index > 1 and self._batch_delay_seconds > 0:
                self._sleep(self._batch_delay_seconds)
            try:
                inserted += self._writer.write_bulk(batch)
                continue
            except Exception as exc:
                degradations.append(f"batch {index}/{len(batches)} ({len(batch)} items) failed: {exc}")
                log_event(
                    logger,
                    logging.WARNING,
                    "restore_batch_failed",
                    batch=index,
                    batches=len(batches),
                    items=len(batch),
                    error=str(exc),
                )

            tier = ExecutionTier.SINGLE
            recovered, batch_errors = self._write_each(batch)
            inserted += recovered
            errors.extend(batch_errors)

        return self._finish(
            BatchExecutionResult(
                total_items=total,
                inserted_count=inserted,
                tier=tier,
                errors=errors,
                degradations=degradations,
            )
        )

    def _write_each(self, items: Sequence[ItemT]) -> tuple[int, list[str]]:
        inserted = 0
        errors: list[str] = []
        for item in items:
            try:
                self._writer.write_one(item)
            except Exception as exc:
                errors.append(f"{self._writer.describe(item)}: {exc}")
                continue
            inserted += 1
        return inserted, errors

    @staticmethod
    def _finish(result: BatchExecutionResult) -> BatchExecutionResult:
        log_event(
            logger,
            logging.INFO if not result.errors else logging.WARNING,
            "restore_completed",
            total_items=result.total_items,
            inserted=result.inserted_count,
            tier=result.tier.name,
            errors=len(result.errors),
            degradations=len(result.degradations),
        )
        return result
