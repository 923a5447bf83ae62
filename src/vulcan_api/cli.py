"""vulcan-api: command line entry points for the API service."""

from __future__ import annotations

import typer
import uvicorn
from alembic import command

from vulcan_api.settings import get_settings
from vulcan_db.migrations_runner import alembic_config, run_migrations

DEFAULT_API_BIND_PORT = 8000

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="Vulcan API CLI (start, migrate, current).",
)


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(name="start", help="Start the API server (requires migrations).")
def start(
    host: str = typer.Option("127.0.0.1", "--host", help="Host/interface for the API server."),
    port: int = typer.Option(DEFAULT_API_BIND_PORT, "--port", help="Port for the API server."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    settings = get_settings()
    typer.echo(f"Starting Vulcan API on http://{host}:{port}")
    uvicorn.run(
        "vulcan_api.asgi:app",
        host=host,
        port=port,
        reload=reload,
        access_log=settings.access_log_enabled,
        log_config=None,
    )


@app.command(name="migrate", help="Apply Alembic migrations (upgrade head).")
def migrate(
    revision: str = typer.Argument("head", help="Alembic revision to upgrade to."),
) -> None:
    run_migrations(get_settings(), revision=revision)
    typer.echo(f"Database upgraded to {revision}.")


@app.command(name="current", help="Show current database revision.")
def current(
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output."),
) -> None:
    with alembic_config(get_settings()) as cfg:
        command.current(cfg, verbose=verbose)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
