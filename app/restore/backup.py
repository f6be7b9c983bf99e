"""
JSON backup export/import and SQL dump reading for the products table.

Backup file layout: `{"table": "products", "timestamp": ..., "count": N, "data": [...]}`.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from app.domain.product import ProductRecord
from app.logging_utils import log_event
from app.storage.base import ProductFilter, ProductStore, SortOrder

logger = logging.getLogger(__name__)

BACKUP_TABLE = "products"
SQL_INSERT_PREFIX = re.compile(r"^\s*INSERT\s+INTO\s+(?:public\.)?\"?products\"?\b", flags=re.IGNORECASE)


class ProductBackupRow(BaseModel):
    """
    One products row as stored in a JSON backup. Unknown columns are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: uuid.UUID | None = None
    source_type: str
    source_name: str
    name: str
    price: int | None = None
    sale_price: int | None = None
    image_url: str | None = None
    source_url: str | None = None
    asin: str | None = None
    is_hidden: bool = False
    is_favorite: bool = False
    memo: str | None = None
    original_product_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_record(self) -> ProductRecord:
        return ProductRecord(**self.model_dump())

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductBackupRow":
        return cls(
            id=record.id,
            source_type=record.source_type,
            source_name=record.source_name,
            name=record.name,
            price=record.price,
            sale_price=record.sale_price,
            image_url=record.image_url,
            source_url=record.source_url,
            asin=record.asin,
            is_hidden=record.is_hidden,
            is_favorite=record.is_favorite,
            memo=record.memo,
            original_product_id=record.original_product_id,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


def backup_filename(now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"products_backup_{moment.strftime('%Y-%m-%dT%H-%M-%S')}.json"


def collect_records(store: ProductStore, *, page_size: int = 1000) -> list[ProductRecord]:
    """
    Read every record in `created_at` ascending order, one page at a time.
    """

    page_size = max(1, page_size)
    records: list[ProductRecord] = []
    offset = 0
    while True:
        page = store.query(ProductFilter(order=SortOrder.CREATED_ASC, limit=page_size, offset=offset))
        records.extend(page)
        if len(page) < page_size:
            return records
        offset += page_size


def export_backup(
    store: ProductStore,
    directory: str | Path,
    *,
    page_size: int = 1000,
    now: datetime | None = None,
) -> Path:
    """
    Write a JSON backup of the whole products table and return its path.
    """

    moment = now or datetime.now(timezone.utc)
    records = collect_records(store, page_size=page_size)
    payload = {
        "table": BACKUP_TABLE,
        "timestamp": moment.isoformat(),
        "count": len(records),
        "data": [ProductBackupRow.from_record(record).model_dump(mode="json") for record in records],
    }

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / backup_filename(moment)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    log_event(logger, logging.INFO, "backup_written", path=str(path), count=len(records))
    return path


def load_backup(path: str | Path) -> list[ProductRecord]:
    """
    Parse a JSON backup into records.

    Raises ValueError when the file is not a products backup or a row is invalid.
    """

    raw: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict) or not isinstance(raw.get("data"), list):
        raise ValueError(f"{path} is not a products backup: missing 'data' list")
    table = raw.get("table", BACKUP_TABLE)
    if table != BACKUP_TABLE:
        raise ValueError(f"{path} is a backup of table '{table}', expected '{BACKUP_TABLE}'")

    records: list[ProductRecord] = []
    for index, row in enumerate(raw["data"]):
        try:
            records.append(ProductBackupRow.model_validate(row).to_record())
        except ValidationError as exc:
            raise ValueError(f"Invalid backup row #{index}: {exc.errors()[0]['msg']}") from exc
    return records


def read_sql_statements(path: str | Path) -> list[str]:
    """
    Return the `INSERT INTO products` statements of a SQL dump, one per line.
    """

    statements: list[str] = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        if SQL_INSERT_PREFIX.match(line):
            statements.append(line.strip())
    return statements
