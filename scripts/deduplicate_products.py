"""
Run the maintenance dedup pass from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.services.deduplication_service import DeduplicationService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Delete duplicate products, keeping the oldest.")
    parser.add_argument(
        "--scope",
        dest="scope",
        default=None,
        help="Optional source name (e.g. DHC) to limit the pass to.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").strip().upper())

    with SessionLocal() as db:
        outcome = DeduplicationService().cleanup(db=db, scope=args.scope)

    print(
        json.dumps(
            {
                "deleted_count": outcome.deleted_count,
                "duplicate_groups": outcome.groups_processed,
                "errors": outcome.errors,
            },
            indent=2,
            ensure_ascii=False,
        )
    )
    return 0 if outcome.completed else 1


if __name__ == "__main__":
    raise SystemExit(main())
