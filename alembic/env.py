from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import get_database_settings, normalize_postgres_url
from db.models import Product  # noqa: F401 import registers the table on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_url() -> str:
    """
    `-x db_url=...` wins, then `sqlalchemy.url` from alembic.ini, then DATABASE_URL.
    """

    override = context.get_x_argument(as_dictionary=True).get("db_url")
    ini_url = (config.get_main_option("sqlalchemy.url") or "").strip()
    if override or ini_url:
        url = normalize_postgres_url(override or ini_url)
        if not url.startswith("postgresql"):
            raise RuntimeError("Migrations only run against PostgreSQL.")
        return url
    return get_database_settings().url


def run_migrations_offline() -> None:
    url = _migration_url()

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _migration_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
