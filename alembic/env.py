# alembic/env.py
# isort: skip_file
# ruff: noqa: E402
"""
Migration environment for the pocketbook schema.

Database URL, first match wins:
  1. config.attributes["url"]          (set by code calling alembic.command)
  2. DATABASE_URL via pocketbook.config.get_settings()

Usage:
  alembic upgrade head
  alembic revision -m "add column" --autogenerate
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool
from sqlmodel import SQLModel

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from pocketbook.config import get_settings
import pocketbook.models  # noqa: F401  # fills SQLModel.metadata for autogenerate

config = context.config

# keep the app's own loggers alive when migrations run in-process
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = SQLModel.metadata


def database_url() -> str:
    return config.attributes.get("url") or get_settings().database_url


def _configure(**kw) -> None:
    url = kw.get("url") or str(kw["connection"].engine.url)
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite rewrites the table for most ALTERs
        render_as_batch=url.startswith("sqlite"),
        **kw,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    _configure(url=database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
