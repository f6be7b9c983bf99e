"""
Restore products from a JSON backup or a SQL dump of INSERT statements.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from app.config import get_restore_settings
from app.domain.restore import BatchExecutionResult
from app.restore.backup import load_backup, read_sql_statements
from app.restore.executor import ProductRecordWriter, SQLStatementWriter, TieredBatchExecutor
from app.storage import SQLAlchemyProductStore
from db.session import SessionLocal, get_engine


def main() -> int:
    parser = argparse.ArgumentParser(description="Restore the products table.")
    parser.add_argument("path", help="Backup file: .json (backup export) or .sql (INSERT statements).")
    parser.add_argument("--batch-size", dest="batch_size", type=int, default=None)
    parser.add_argument("--batch-delay-seconds", dest="batch_delay_seconds", type=float, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").strip().upper())

    settings = get_restore_settings()
    batch_size = args.batch_size or settings.batch_size
    batch_delay = settings.batch_delay_seconds if args.batch_delay_seconds is None else args.batch_delay_seconds

    path = Path(args.path)
    if path.suffix.lower() == ".sql":
        statements = read_sql_statements(path)
        executor = TieredBatchExecutor(
            SQLStatementWriter(get_engine()),
            batch_size=batch_size,
            batch_delay_seconds=batch_delay,
        )
        result = executor.execute(statements)
    else:
        records = load_backup(path)
        with SessionLocal() as db:
            executor = TieredBatchExecutor(
                ProductRecordWriter(SQLAlchemyProductStore(session=db)),
                batch_size=batch_size,
                batch_delay_seconds=batch_delay,
            )
            result = executor.execute(records)

    print(json.dumps(_summary(result), indent=2, ensure_ascii=False))
    return 0 if not result.errors else 1


def _summary(result: BatchExecutionResult) -> dict[str, object]:
    return {
        "total_items": result.total_items,
        "inserted_count": result.inserted_count,
        "tier": result.tier.name.lower(),
        "degradations": result.degradations,
        "errors": result.errors,
    }


if __name__ == "__main__":
    raise SystemExit(main())
