"""Database engine helpers (Postgres via psycopg, SQLite for local use and tests)."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool


class DatabaseSettings(Protocol):
    database_url: str
    database_echo: bool
    database_pool_size: int
    database_max_overflow: int
    database_pool_timeout: int
    database_pool_recycle: int


def _is_memory_sqlite(url: URL) -> bool:
    return url.database in (None, "", ":memory:")


def ensure_sqlite_database_directory(url: URL) -> None:
    """Create the parent directory of a file-backed SQLite database."""

    database = (url.database or "").strip()
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    path = Path(database)
    if not path.is_absolute():
        path = Path.cwd() / path
    path.parent.mkdir(parents=True, exist_ok=True)


def _create_sqlite_engine(url: URL, settings: DatabaseSettings) -> Engine:
    kwargs: dict[str, object] = {
        "echo": settings.database_echo,
        "connect_args": {"check_same_thread": False},
    }
    if _is_memory_sqlite(url):
        # One shared connection so every session sees the same in-memory schema.
        kwargs["poolclass"] = StaticPool
    else:
        ensure_sqlite_database_directory(url)

    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def _create_postgres_engine(url: URL, settings: DatabaseSettings) -> Engine:
    if url.drivername in {"postgresql", "postgres"}:
        url = url.set(drivername="postgresql+psycopg")
    if not url.drivername.startswith("postgresql+psycopg"):
        raise ValueError("For Postgres, use postgresql+psycopg://... (psycopg is required).")

    return create_engine(
        url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_use_lifo=True,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        pool_recycle=settings.database_pool_recycle,
    )


def build_engine(settings: DatabaseSettings) -> Engine:
    """Create the SQLAlchemy engine described by ``settings``."""

    url = make_url(str(settings.database_url))
    backend = url.get_backend_name()
    if backend == "sqlite":
        return _create_sqlite_engine(url, settings)
    if backend in {"postgresql", "postgres"}:
        return _create_postgres_engine(url, settings)
    raise ValueError(f"Unsupported database backend: {backend!r}")


__all__ = ["DatabaseSettings", "build_engine", "ensure_sqlite_database_directory"]
