"""
Backup export and tiered restore tooling.
"""

from app.restore.backup import export_backup, load_backup, read_sql_statements
from app.restore.executor import (
    BatchWriter,
    ProductRecordWriter,
    SQLStatementWriter,
    TieredBatchExecutor,
)

__all__ = [
    "BatchWriter",
    "ProductRecordWriter",
    "SQLStatementWriter",
    "TieredBatchExecutor",
    "export_backup",
    "load_backup",
    "read_sql_statements",
]
