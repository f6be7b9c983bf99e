"""
tests/test_db_config.py

DATABASE_URL handling for the product store.
"""

from __future__ import annotations

import pytest

from app.errors import ConfigurationError
from db.config import database_settings_from_env, normalize_postgres_url


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgres://u:p@db/products", "postgresql+psycopg://u:p@db/products"),
        ("postgresql://u:p@db/products", "postgresql+psycopg://u:p@db/products"),
        ("postgresql+psycopg://u:p@db/products", "postgresql+psycopg://u:p@db/products"),
        ("sqlite:///products.db", "sqlite:///products.db"),
    ],
)
def test_normalize_postgres_url(raw: str, expected: str) -> None:
    assert normalize_postgres_url(raw) == expected


class TestDatabaseSettingsFromEnv:
    def test_url_and_pool_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/products")
        monkeypatch.setenv("PRODUCT_DB_POOL_SIZE", "2")
        monkeypatch.setenv("PRODUCT_DB_MAX_OVERFLOW", "not-a-number")
        monkeypatch.setenv("PRODUCT_DB_ECHO", "true")

        settings = database_settings_from_env()

        assert settings.url == "postgresql+psycopg://u:p@db/products"
        assert settings.pool_size == 2
        assert settings.max_overflow == 10
        assert settings.echo is True

    def test_missing_url_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(ConfigurationError, match="DATABASE_URL is not set"):
            database_settings_from_env()

    def test_non_postgres_url_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite:///products.db")

        with pytest.raises(ConfigurationError, match="PostgreSQL"):
            database_settings_from_env()
