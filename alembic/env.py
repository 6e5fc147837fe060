from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool  # type: ignore[import-not-found]

from alembic import context
from taskhub.core.db import build_dsn
from taskhub.core.settings import settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def run_migrations_offline() -> None:
    context.configure(
        url=build_dsn(settings),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    # The async driver URL also works for alembic's sync engine with psycopg 3.
    configuration["sqlalchemy.url"] = build_dsn(settings)

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
