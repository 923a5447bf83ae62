"""Programmatic Alembic runner for Vulcan migrations."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from importlib import resources
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config

__all__ = ["alembic_config", "run_migrations"]


def _alembic_resource_paths() -> tuple[Path, Path]:
    package = resources.files("vulcan_db")
    return package / "alembic.ini", package / "migrations"


@contextmanager
def alembic_config(settings: Any) -> Iterator[Config]:
    alembic_ini_ref, migrations_ref = _alembic_resource_paths()
    with resources.as_file(alembic_ini_ref) as alembic_ini, resources.as_file(
        migrations_ref
    ) as migrations_dir:
        if not alembic_ini.exists():
            raise FileNotFoundError(f"Alembic config not found at {alembic_ini}")
        if not migrations_dir.exists():
            raise FileNotFoundError(f"Alembic migrations not found at {migrations_dir}")

        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(migrations_dir))
        alembic_cfg.attributes["settings"] = settings
        alembic_cfg.attributes["configure_logger"] = False
        # ConfigParser treats % as interpolation; escape to preserve URL encoding.
        safe_url = str(settings.database_url).replace("%", "%%")
        alembic_cfg.set_main_option("sqlalchemy.url", safe_url)
        yield alembic_cfg


def run_migrations(settings: Any, *, revision: str = "head") -> None:
    with alembic_config(settings) as alembic_cfg:
        command.upgrade(alembic_cfg, revision)
