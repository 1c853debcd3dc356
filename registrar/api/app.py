# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the registrar API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request

from registrar import __version__
from registrar.api.routes import health
from registrar.api.v1 import router as v1_router
from registrar.core.config import get_settings
from registrar.infrastructure.store import close_store, init_store
from registrar.utils.logging import clear_context, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and opens the document store on startup; closes
    the store on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting registrar API",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    # =========================================================================
    # Startup
    # =========================================================================

    await init_store(settings)
    logger.info("Document store initialized")

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    try:
        await close_store()
        logger.info("Document store closed")
    except Exception as e:
        logger.warning("Error closing document store: %s", str(e))

    logger.info("Shutting down registrar API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Registrar API",
        description="School enrollment records, sections and grade sheets",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # =========================================================================
    # Middleware
    # =========================================================================

    @app.middleware("http")
    async def clear_log_context(request: Request, call_next):
        clear_context()
        try:
            return await call_next(request)
        finally:
            clear_context()

    # =========================================================================
    # Routes
    # =========================================================================

    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
