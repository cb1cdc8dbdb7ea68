"""CLI commands for formforge."""

import logging
import sys
from pathlib import Path

import click

PACKAGE_DIR = Path(__file__).parent


@click.group()
@click.version_option(package_name="formforge")
def cli():
    """formforge - build forms and collect submissions over a JSON API."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the API server."""
    import asyncio
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = Config()
    config.application_path = "formforge.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload or workers > 1:
        config.use_reloader = reload
        from hypercorn.run import run
        run(config)
        return

    from formforge.asgi import app

    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


def _run_alembic(args: list[str]) -> None:
    """Build an Alembic Config from the packaged alembic.ini and run the given command."""
    from alembic.config import CommandLine, Config

    alembic_ini = PACKAGE_DIR / "alembic.ini"
    if not alembic_ini.exists():
        click.echo("Error: Could not find alembic.ini", err=True)
        sys.exit(1)

    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(PACKAGE_DIR / "alembic"))

    # Parse and run through CommandLine for proper subcommand dispatch
    cmd = CommandLine()
    options = cmd.parser.parse_args(args)
    if not hasattr(options, "cmd"):
        cmd.parser.error("too few arguments")
    else:
        cfg.cmd_opts = options
        fn, positional, kwarg = options.cmd
        fn(
            cfg,
            *[getattr(options, k, None) for k in positional],
            **{k: getattr(options, k, None) for k in kwarg},
        )


@cli.command(
    context_settings=dict(
        ignore_unknown_options=True,
        allow_extra_args=True,
    )
)
@click.pass_context
def db(ctx):
    """Run database migrations via Alembic.

    \b
    Examples:
        formforge db upgrade head     # Apply all migrations
        formforge db downgrade -1     # Rollback one migration
        formforge db current          # Show current revision
        formforge db history          # Show migration history
    """
    if not ctx.args:
        click.echo(ctx.get_help())
        return

    _run_alembic(list(ctx.args))


async def _create_tables(url: str) -> None:
    from sqlalchemy.ext.asyncio import create_async_engine

    from formforge.db import models  # noqa: F401
    from formforge.db.base import Base

    engine = create_async_engine(url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


@cli.command("init-db")
@click.option("--url", default=None, help="Database URL (defaults to the configured one)")
def init_db(url):
    """Create all tables directly, without migrations. Meant for development."""
    import asyncio

    from formforge.config import get_settings

    url = url or get_settings().db.url
    asyncio.run(_create_tables(url))
    click.echo("Database tables created")
