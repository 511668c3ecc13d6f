# migrations/env.py - Alembic environment bound to the application settings
from logging.config import fileConfig
import logging

from alembic import context
from sqlalchemy import create_engine, pool

from registrar.core.config import get_settings
from registrar.models import Base

config = context.config

# Logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

log = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def choose_url() -> str:
    """``-x sqlalchemy_url=...`` wins over the configured database"""
    x = context.get_x_argument(as_dictionary=True)
    if x.get("sqlalchemy_url"):
        return x["sqlalchemy_url"]
    return get_settings().database_url


def run_migrations_offline() -> None:
    url = choose_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = choose_url()
    engine = create_engine(url, poolclass=pool.NullPool)
    log.info(f"Running migrations against {url.split('@')[-1]}")

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
