"""
Run a product scrape or the favorites refresh from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.services.product_scraping_service import ProductScrapingService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Scrape product listings into the product store.")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--source",
        dest="source",
        default=None,
        help="Site key or name from the sites config (dhc, vt, innisfree).",
    )
    target.add_argument(
        "--favorites",
        action="store_true",
        help="Refresh prices of favorite products instead of a full site scrape.",
    )
    parser.add_argument(
        "--timeout-seconds",
        dest="timeout_seconds",
        type=float,
        default=None,
        help="Per-request timeout override.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").strip().upper())

    service = ProductScrapingService()
    with SessionLocal() as db:
        if args.favorites:
            result = service.refresh_favorites(db=db)
        else:
            result = service.scrape_source(
                db=db,
                source=args.source,
                timeout_seconds=args.timeout_seconds,
            )

    payload = {
        "source": result.source,
        "mode": result.mode.value,
        "success": result.success,
        "total_found": result.total_found,
        "saved_count": result.saved_count,
        "skipped_count": result.skipped_count,
        "updated_count": result.updated_count,
        "failed_count": result.failed_count,
        "proxy_used": result.proxy_used,
        "errors": result.errors,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
