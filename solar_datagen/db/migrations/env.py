"""
Alembic environment for the record store.

Migrations run against DATABASE_URL through the same engine factory the
service uses (solar_datagen/db/session.py). The ORM metadata is exposed for
autogenerate.

CHANGELOG:
- 2026-10-06: Reuse the session module's engine factory
- 2026-10-03: Initial creation
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from solar_datagen.db.models import Base
from solar_datagen.db.session import create_engine, get_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit migration SQL to the script output without connecting."""
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_engine()
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
