"""FastAPI lifespan helpers for the Vulcan application."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import Lifespan
from sqlalchemy import inspect, text
from sqlalchemy.engine import make_url

from vulcan_api.common.logging import log_context
from vulcan_api.db import get_engine_from_app, init_db, shutdown_db
from vulcan_api.settings import Settings
from vulcan_db.migrations_runner import run_migrations

logger = logging.getLogger(__name__)


def create_application_lifespan(
    *,
    settings: Settings,
) -> Lifespan[FastAPI]:
    """Return the FastAPI lifespan handler used by the app factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        logger.info(
            "vulcan_api.startup",
            extra=log_context(
                version=settings.app_version,
                smtp_enabled=settings.smtp_enabled,
                slack_enabled=settings.slack_enabled,
                rule_unlock_min_role=settings.rule_unlock_min_role.value,
            ),
        )

        safe_url = make_url(str(settings.database_url)).render_as_string(hide_password=True)
        if settings.database_migrate_on_startup:
            logger.info("db.migrate.start", extra={"database_url": safe_url})
            await asyncio.to_thread(run_migrations, settings)
            logger.info("db.migrate.complete", extra={"database_url": safe_url})

        logger.info("db.init.start", extra={"database_url": safe_url})
        init_db(app, settings)
        logger.info("db.init.complete", extra={"database_url": safe_url})
        engine = get_engine_from_app(app)

        def _check_db_connection() -> None:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))

        def _check_schema() -> bool:
            with engine.connect() as conn:
                return inspect(conn).has_table("memberships")

        try:
            try:
                await asyncio.to_thread(_check_db_connection)
            except Exception as exc:
                logger.error(
                    "db.connection.failed",
                    extra={"database_url": safe_url},
                    exc_info=True,
                )
                raise RuntimeError(
                    "Database is not reachable. Verify VULCAN_DATABASE_URL and credentials."
                ) from exc

            # Fail fast if the schema hasn't been migrated.
            if not await asyncio.to_thread(_check_schema):
                logger.error("db.schema.missing", extra={"database_url": safe_url})
                raise RuntimeError(
                    "Database schema is not initialized. "
                    "Run `vulcan-api migrate` before starting the API."
                )

            yield
        finally:
            shutdown_db(app)
            logger.info("vulcan_api.shutdown")

    return lifespan


__all__ = ["create_application_lifespan"]
