"""Alembic environment configuration."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context

from vulcan_db import Base
from vulcan_db.engine import build_engine

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)


# Import models so Base.metadata is populated
def _import_models() -> None:
    import vulcan_db.models  # noqa: F401


_import_models()
target_metadata = Base.metadata


def _settings():
    provided = config.attributes.get("settings")
    if provided is not None:
        return provided

    from vulcan_api.settings import Settings

    override_url = config.get_main_option("sqlalchemy.url")
    if override_url:
        return Settings(_env_file=None, database_url=override_url.replace("%%", "%"))
    return Settings()


def run_migrations_offline() -> None:
    url = str(_settings().database_url)
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = build_engine(_settings())
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
