"""Migrations for the cache_entries table behind SqlTimedCache."""

import asyncio
from logging.config import fileConfig

from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from fundscope.infrastructure.config import get_settings  # noqa: E402
from fundscope.infrastructure.database import Base  # noqa: E402
import fundscope.infrastructure.persistence.models  # noqa: E402, F401

target_metadata = Base.metadata

# alembic.ini may pin a cache file; otherwise use the app's DATABASE_URL.
DATABASE_URL = config.get_main_option("sqlalchemy.url") or get_settings().database_url


def _configure(**kwargs) -> None:  # type: ignore[no-untyped-def]
    # SQLite cannot ALTER columns in place, so cache schema changes run in batch mode.
    context.configure(target_metadata=target_metadata, render_as_batch=True, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection):  # type: ignore[no-untyped-def]
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(DATABASE_URL)
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
