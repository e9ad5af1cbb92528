"""Alembic environment for the entries schema.

The database URL comes from the active settings profile; pass
``-x dburl=<url>`` to migrate another database.
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import MetaData, engine_from_config, pool

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.app.config import load_settings  # noqa: E402
from backend.app.domain.entrystore.schema import build_entries_table  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = build_entries_table(MetaData()).metadata


def _database_url() -> str:
    url = context.get_x_argument(as_dictionary=True).get("dburl")
    url = url or load_settings().database_url
    if not url:
        raise RuntimeError("database url is not configured")
    return url


database_url = _database_url()
config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
compare_options = {"compare_type": True, "target_metadata": target_metadata}


def run_migrations_offline() -> None:
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **compare_options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **compare_options)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
