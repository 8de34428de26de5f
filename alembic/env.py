"""
Alembic environment configuration for PayHub.

Supports async MySQL with SQLAlchemy 2.0.
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# CONFIG has to be set before anything from payhub_backend is imported
os.environ.setdefault("CONFIG", "resources/config/local.yaml")

from payhub_backend.config import settings  # noqa: E402
from payhub_backend.database import Base  # noqa: E402

# Import all models to ensure they are registered with Base.metadata
from payhub_backend.modules.documents import models as document_models  # noqa: E402, F401
from payhub_backend.modules.jobs import models as job_models  # noqa: E402, F401
from payhub_backend.modules.profiles import models as profile_models  # noqa: E402, F401
from payhub_backend.modules.tenants import models as tenant_models  # noqa: E402, F401
from payhub_backend.modules.transactions import (  # noqa: E402, F401
    models as transaction_models,
)

# Alembic Config object
config = context.config

# Override sqlalchemy.url with value from settings
config.set_main_option("sqlalchemy.url", settings.database_url)

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Metadata for autogenerate support
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with the given connection."""
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode using async engine."""
    connect_args = {}
    db_url = settings.database_url
    if db_url.startswith("mysql+asyncmy"):
        connect_args = {
            "ssl": {
                "check_hostname": settings.database_ssl_check_hostname,
                "verify_cert": settings.database_ssl_verify_cert,
            },
        }

    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = db_url

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=connect_args,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
