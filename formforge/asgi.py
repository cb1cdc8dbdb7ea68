"""ASGI application factory for formforge."""

import logging
from typing import Any

from advanced_alchemy.config import EngineConfig
from advanced_alchemy.extensions.litestar import (
    AsyncSessionConfig,
    SQLAlchemyAsyncConfig,
    SQLAlchemyPlugin,
)
from litestar import Litestar
from litestar.config.cors import CORSConfig
from litestar.datastructures import State

from formforge.config import Settings, get_settings
from formforge.controllers import FormsController, SubmissionsController
from formforge.db.base import Base
from formforge.lib import observability
from formforge.lib.exceptions import EXCEPTION_HANDLERS

logger = logging.getLogger(__name__)


def create_db_config(settings: Settings) -> SQLAlchemyAsyncConfig:
    """Build the advanced-alchemy config for the configured database."""
    if "sqlite" in settings.db.url:
        engine_config = EngineConfig(echo=settings.db.echo)
    else:
        engine_kwargs: dict[str, Any] = dict(
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.pool_overflow,
            pool_timeout=settings.db.pool_timeout,
            pool_pre_ping=settings.db.pool_pre_ping,
            echo=settings.db.echo,
        )
        engine_config = EngineConfig(**engine_kwargs)

    return SQLAlchemyAsyncConfig(
        connection_string=settings.db.url,
        metadata=Base.metadata,
        create_all=settings.db.create_all,
        session_config=AsyncSessionConfig(expire_on_commit=False),
        engine_config=engine_config,
    )


def create_app(settings: Settings | None = None) -> Litestar:
    """Create and configure the Litestar application.

    Args:
        settings: Settings to build the app with; defaults to ``get_settings()``

    Returns:
        The Litestar app, without ASGI-level instrumentation
    """
    settings = settings or get_settings()

    observability.configure(settings)

    db_config = create_db_config(settings)

    cors_config = None
    if settings.cors.allow_origins:
        cors_config = CORSConfig(allow_origins=settings.cors.allow_origins)

    async def on_startup(_app: Litestar) -> None:
        observability.instrument_sqlalchemy(db_config.get_engine())
        logger.info("formforge started (database: %s)", db_config.get_engine().url.render_as_string())

    return Litestar(
        on_startup=[on_startup],
        route_handlers=[FormsController, SubmissionsController],
        plugins=[SQLAlchemyPlugin(config=db_config)],
        cors_config=cors_config,
        exception_handlers=EXCEPTION_HANDLERS,
        state=State({"settings": settings}),
        debug=settings.debug,
    )


app = observability.instrument_app(create_app())
