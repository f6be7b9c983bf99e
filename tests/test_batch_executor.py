"""
tests/test_batch_executor.py

TieredBatchExecutor fallback behaviour with recording writers, plus the SQL
statement writer against an in-memory SQLite engine.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from app.domain.restore import ExecutionTier
from app.restore import ProductRecordWriter, SQLStatementWriter, TieredBatchExecutor
from app.restore.executor import BatchWriter
from tests.conftest import InMemoryProductStore, RecordingSleep, make_record


class RecordingWriter(BatchWriter[int]):
    """
    Bulk calls covering `bulk_failures` raise; single writes of `poisoned` raise.
    """

    supports_bulk = True

    def __init__(self, *, bulk_failures: set[int] | None = None, poisoned: set[int] | None = None) -> None:
        self.bulk_failures = bulk_failures or set()
        self.poisoned = poisoned or set()
        self.written: list[int] = []
        self.bulk_sizes: list[int] = []

    def write_bulk(self, items: Sequence[int]) -> int:
        self.bulk_sizes.append(len(items))
        if self.bulk_failures.intersection(items):
            raise RuntimeError("statement timeout")
        self.written.extend(items)
        return len(items)

    def write_one(self, item: int) -> None:
        if item in self.poisoned:
            raise RuntimeError("constraint violation")
        self.written.append(item)

    def describe(self, item: int) -> str:
        return f"item-{item}"


class SingleOnlyWriter(BatchWriter[int]):
    def __init__(self) -> None:
        self.written: list[int] = []

    def write_one(self, item: int) -> None:
        self.written.append(item)


# ---------------------------------------------------------------------------
# Tier fallback
# ---------------------------------------------------------------------------


class TestTieredBatchExecutor:
    def test_bulk_success_is_tier_one(self) -> None:
        writer = RecordingWriter()
        sleep = RecordingSleep()

        result = TieredBatchExecutor(writer, sleep=sleep).execute(range(250))

        assert result.tier is ExecutionTier.BULK
        assert result.inserted_count == 250
        assert writer.bulk_sizes == [250]
        assert sleep.calls == []

    def test_failed_batch_recovers_through_single_writes(self) -> None:
        writer = RecordingWriter(bulk_failures={150})
        sleep = RecordingSleep()

        result = TieredBatchExecutor(writer, batch_size=100, batch_delay_seconds=0.2, sleep=sleep).execute(
            range(250)
        )

        assert result.total_items == 250
        assert result.inserted_count == 250
        assert result.tier is ExecutionTier.SINGLE
        assert result.errors == []
        assert len(result.degradations) == 2
        assert writer.bulk_sizes == [250, 100, 100, 50]
        assert sorted(writer.written) == list(range(250))
        assert sleep.calls == [0.2, 0.2]

    def test_only_items_failing_every_tier_are_errors(self) -> None:
        writer = RecordingWriter(bulk_failures={150}, poisoned={150, 151})

        result = TieredBatchExecutor(writer, batch_size=100, sleep=RecordingSleep()).execute(range(250))

        assert result.inserted_count == 248
        assert result.errors == ["item-150: constraint violation", "item-151: constraint violation"]

    def test_all_batches_succeeding_after_bulk_failure_is_tier_two(self) -> None:
        writer = RecordingWriter()
        original = writer.write_bulk

        def flaky_bulk(items: Sequence[int]) -> int:
            if len(items) == 250:
                raise RuntimeError("payload too large")
            return original(items)

        writer.write_bulk = flaky_bulk  # type: ignore[method-assign]

        result = TieredBatchExecutor(writer, batch_size=100, sleep=RecordingSleep()).execute(range(250))

        assert result.tier is ExecutionTier.BATCHED
        assert result.inserted_count == 250
        assert result.degradations == ["bulk write of 250 items failed: payload too large"]

    def test_writer_without_bulk_goes_straight_to_single(self) -> None:
        writer = SingleOnlyWriter()

        result = TieredBatchExecutor(writer, sleep=RecordingSleep()).execute([1, 2, 3])

        assert result.tier is ExecutionTier.SINGLE
        assert result.inserted_count == 3
        assert writer.written == [1, 2, 3]
        assert result.degradations

    def test_empty_input(self) -> None:
        result = TieredBatchExecutor(RecordingWriter(), sleep=RecordingSleep()).execute([])
        assert (result.total_items, result.inserted_count, result.tier) == (0, 0, ExecutionTier.BULK)


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


class TestProductRecordWriter:
    def test_bulk_failure_falls_back_to_per_record_inserts(self) -> None:
        store = InMemoryProductStore()
        store.fail_insert = lambda record: record.name == "Broken"
        records = [make_record("A"), make_record("Broken"), make_record("C")]

        result = TieredBatchExecutor(ProductRecordWriter(store), batch_size=2, sleep=RecordingSleep()).execute(
            records
        )

        assert result.inserted_count == 2
        assert len(result.errors) == 1
        assert "Broken" in result.errors[0]
        assert sorted(record.name for record in store.records.values()) == ["A", "C"]


class TestSQLStatementWriter:
    @pytest.fixture()
    def engine(self):
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        with engine.begin() as connection:
            connection.exec_driver_sql("CREATE TABLE products (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        yield engine
        engine.dispose()

    def test_duplicate_row_only_fails_its_own_statement(self, engine) -> None:
        statements = [
            "INSERT INTO products (id, name) VALUES (1, 'a')",
            "INSERT INTO products (id, name) VALUES (2, 'b')",
            "INSERT INTO products (id, name) VALUES (2, 'b-again')",
            "INSERT INTO products (id, name) VALUES (3, 'c')",
        ]

        result = TieredBatchExecutor(SQLStatementWriter(engine), batch_size=2, sleep=RecordingSleep()).execute(
            statements
        )

        with engine.connect() as connection:
            rows = connection.execute(text("SELECT id, name FROM products ORDER BY id")).all()
        assert [tuple(row) for row in rows] == [(1, "a"), (2, "b"), (3, "c")]
        assert result.inserted_count == 3
        assert result.tier is ExecutionTier.SINGLE
        assert len(result.errors) == 1
        assert "b-again" in result.errors[0]
