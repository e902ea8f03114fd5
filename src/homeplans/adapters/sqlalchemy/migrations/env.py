"""Alembic environment configuration for homeplans."""

from __future__ import annotations

import logging
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

from homeplans.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from homeplans.config import get_database_config

config = context.config

if config.config_file_name is None or Path(config.config_file_name).suffix != ".ini":
    logging.basicConfig(level=logging.INFO)
else:
    from logging.config import fileConfig

    fileConfig(config.config_file_name)

log = logging.getLogger("alembic.env")

start_mappers()

target_metadata = mapper_registry.metadata

_CONFIGURE_OPTIONS: dict[str, object] = {
    "target_metadata": target_metadata,
    "render_as_batch": True,
    "compare_type": True,
    "compare_server_default": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without a live connection."""

    context.configure(url=_database_url(), literal_binds=True, **_CONFIGURE_OPTIONS)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a connection, reusing one handed in by ``upgrade_head``."""

    existing_connection = config.attributes.get("connection")
    if existing_connection is not None:
        context.configure(connection=existing_connection, **_CONFIGURE_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **_CONFIGURE_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
