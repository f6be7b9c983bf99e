"""
db/config.py

Environment loading and connection settings for the product store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from app.errors import ConfigurationError

_ENV_FILES = (".env", ".env.local")
_POSTGRES_PREFIXES = {
    "postgres://": "postgresql+psycopg://",
    "postgresql://": "postgresql+psycopg://",
}


def load_env_files() -> None:
    """
    Copy KEY=VALUE lines from the project's `.env` files into os.environ.

    Variables already set in the process win over file values.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in _ENV_FILES:
        env_path = project_root / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip().removeprefix("export ").strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = (part.strip() for part in line.split("=", 1))
            if key:
                os.environ.setdefault(key, value.strip("\"'"))


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite bare postgres URLs to the psycopg driver form SQLAlchemy expects.
    """

    for prefix, replacement in _POSTGRES_PREFIXES.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix) :]
    return url


def _env_int(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection and pool settings for the `products` database.
    """

    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle_seconds: int = 1800


def database_settings_from_env() -> DatabaseSettings:
    """
    Build settings from DATABASE_URL and the PRODUCT_DB_* pool variables.

    Raises ConfigurationError when DATABASE_URL is missing or does not point
    at PostgreSQL.
    """

    load_env_files()
    raw_url = (os.getenv("DATABASE_URL") or "").strip()
    if not raw_url:
        raise ConfigurationError("DATABASE_URL is not set.")

    url = normalize_postgres_url(raw_url)
    if not url.startswith("postgresql"):
        raise ConfigurationError("DATABASE_URL must be a PostgreSQL URL.")

    return DatabaseSettings(
        url=url,
        echo=os.getenv("PRODUCT_DB_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
        pool_size=_env_int("PRODUCT_DB_POOL_SIZE", 5),
        max_overflow=_env_int("PRODUCT_DB_MAX_OVERFLOW", 10),
        pool_recycle_seconds=_env_int("PRODUCT_DB_POOL_RECYCLE_SECONDS", 1800),
    )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    return database_settings_from_env()
