from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import Any

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - DATABASE_URL must be set and point at PostgreSQL.
    - Proxy settings are not required; a broken proxy setup only disables the proxy.
    """

    from app.errors import ConfigurationError
    from db.config import database_settings_from_env

    errors: list[str] = []

    try:
        database_settings_from_env()
    except ConfigurationError as exc:
        errors.append(str(exc))

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate configuration, DB connectivity and schema on boot."""
    if application.state.startup_checks:
        _validate_env()
        _check_db()
        logging.getLogger(__name__).info("Database connectivity confirmed")
        _check_schema()
        logging.getLogger(__name__).info("Database schema validated")

    from app.proxy import describe_proxy_status, get_proxy_decision

    logging.getLogger(__name__).info(
        "Proxy status %s",
        describe_proxy_status(get_proxy_decision()),
    )
    yield


def create_app(*, startup_checks: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="Product Ingest API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.state.startup_checks = startup_checks

    from app.api.routers import (
        image_proxy_router,
        product_maintenance_router,
        product_scraping_router,
    )

    application.include_router(product_scraping_router)
    application.include_router(product_maintenance_router)
    application.include_router(image_proxy_router)

    @application.get("/health")
    def healthcheck() -> dict[str, Any]:
        from app.proxy import describe_proxy_status, get_proxy_decision

        return {"status": "ok", **describe_proxy_status(get_proxy_decision())}

    return application


app = create_app()
