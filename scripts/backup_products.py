"""
Export the products table to a timestamped JSON backup.
"""

from __future__ import annotations

import argparse
import logging
import os

from app.config import get_restore_settings
from app.restore.backup import export_backup
from app.storage import SQLAlchemyProductStore
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Back up the products table as JSON.")
    parser.add_argument(
        "--output-dir",
        dest="output_dir",
        default="backups",
        help="Directory for the backup file (created when missing).",
    )
    args = parser.parse_args()

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").strip().upper())

    settings = get_restore_settings()
    with SessionLocal() as db:
        path = export_backup(
            SQLAlchemyProductStore(session=db),
            args.output_dir,
            page_size=settings.export_page_size,
        )
    print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
