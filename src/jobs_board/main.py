"""FastAPI application entry point for the jobs board proxy.

Lifecycle:
    1. Startup: Initialize logging, the upstream job store client and the chain reader.
    2. Running: Serve the job store proxy, the discovery manifest and /health.
    3. Shutdown: Close the upstream client and Redis gracefully.

Run with:
    uvicorn jobs_board.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx
from fastapi import FastAPI

from jobs_board.config import get_settings
from jobs_board.logging_config import get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings = get_settings()

    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
    )
    logger = get_logger(__name__)
    logger.info("app.starting", env=settings.app_env, job_store=settings.job_store_url)

    app.state.upstream = httpx.AsyncClient(
        base_url=settings.job_store_url.rstrip("/"),
        timeout=settings.job_store_timeout_seconds,
    )

    from jobs_board.chain.reader import ChainReader

    app.state.reader = ChainReader.from_settings(settings)

    logger.info("app.started", host=settings.app_host, port=settings.app_port)

    yield

    logger.info("app.shutting_down")
    await app.state.upstream.aclose()

    from jobs_board.infrastructure.redis_client import close_redis

    await close_redis()
    logger.info("app.stopped")


def create_app() -> FastAPI:
    """Application factory — creates and configures the FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title=settings.service_name,
        description=settings.service_description,
        version=settings.service_version,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    from jobs_board.api.middleware import setup_middleware

    setup_middleware(app)

    from jobs_board.api.routes.discovery import router as discovery_router
    from jobs_board.api.routes.health import router as health_router
    from jobs_board.api.routes.proxy import router as proxy_router

    app.include_router(health_router)
    app.include_router(discovery_router)
    app.include_router(proxy_router)

    return app


# The app instance used by Uvicorn
app = create_app()
