import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import URL, make_url
from sqlmodel import SQLModel

from alembic import context
from src.carledger.core.config import get_settings

# Registers every table on SQLModel.metadata
from src.carledger.models import DocumentSequence, Invoice, RefreshToken, User  # noqa: F401

config = context.config

if config.config_file_name is not None and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def sync_url() -> URL:
    """The application URL with its async driver swapped for the backend's default one."""
    url = make_url(get_settings().database_url)
    return url.set(drivername=url.get_backend_name())


def _configure_options(url: URL) -> dict[str, object]:
    # SQLite cannot ALTER most things in place; batch mode rebuilds the table
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.get_backend_name() == "sqlite",
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of executing it."""
    url = sync_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = sync_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url.render_as_string(hide_password=False)
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    try:
        with connectable.connect() as connection:
            context.configure(connection=connection, **_configure_options(url))
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
