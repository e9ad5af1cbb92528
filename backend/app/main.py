"""FastAPI entrypoint for the Mentat API server."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .api.dependencies import get_entry_gateway, reset_entry_gateway
from .api.routers import health, rpc
from .config import Settings, load_settings
from .infra.db import connect_engine, dispose_engine
from .infra.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Instantiate the FastAPI app and register routers.

    The store connection and the entry gateway are set up when the app
    starts and released when it stops. A failed connect or a missing
    `entries` table aborts startup so nothing is served.
    """

    settings = settings or load_settings()
    configure_logging(settings.logging.level, settings.logging.format)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if not settings.database_url:
            raise RuntimeError("database url is not configured")
        logger.info("service_starting", extra={"environment": settings.environment})
        connect_engine(settings.database_url)
        try:
            get_entry_gateway()
        except Exception:
            dispose_engine()
            raise
        try:
            yield
        finally:
            logger.info("service_stopping")
            reset_entry_gateway()
            dispose_engine()

    application = FastAPI(title="Mentat API", version="0.1.0", lifespan=lifespan)
    application.include_router(health.router)
    application.include_router(rpc.build_router(settings.rpc.path))
    logger.info("rpc_endpoint_registered", extra={"path": settings.rpc.path})
    return application


app = create_app()
