"""Command-line interface for ReelAuth.

This module provides the CLI commands for running and managing
the ReelAuth service.
"""

from typing import NoReturn

import click
from sqlalchemy.engine import make_url

from reelauth import __version__
from reelauth.core.config import get_settings
from reelauth.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="ReelAuth")
def cli() -> None:
    """ReelAuth - email/password authentication service.

    Settings are read from REELAUTH_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the ReelAuth server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting ReelAuth server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "reelauth.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Allow running in production")
def init_db(force: bool) -> None:
    """Create the database tables."""
    import asyncio

    from reelauth.infrastructure.persistence.database import DatabaseManager

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo("ERROR: Running in production mode. Pass --force to create tables.", err=True)
        raise SystemExit(1)

    async def initialize() -> None:
        db = DatabaseManager(settings)
        try:
            await db.create_tables()
        finally:
            await db.disconnect()

    asyncio.run(initialize())
    database_url = make_url(settings.database_url).render_as_string(hide_password=True)
    click.echo(f"Database initialized: {database_url}")


@cli.command()
def info() -> None:
    """Display ReelAuth configuration."""
    settings = get_settings()
    database_url = make_url(settings.database_url).render_as_string(hide_password=True)
    email_delivery = (
        f"smtp://{settings.smtp_host}:{settings.smtp_port}" if settings.smtp_host else "disabled"
    )

    click.echo(f"""
ReelAuth v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}
  App URL:      {settings.app_url}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {database_url}
  Echo:         {settings.db_echo}

Tokens:
  Access:       {settings.access_token_expire_seconds} seconds
  Refresh:      {settings.refresh_token_expire_seconds} seconds
  Email Verify: {settings.email_verify_token_expire_seconds} seconds
  Resend Wait:  {settings.resend_email_debounce_seconds} seconds

Email:
  Delivery:     {email_delivery}
  From:         {settings.email_from_name} <{settings.email_from_address}>

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
