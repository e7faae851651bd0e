# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the School Registry API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from school_registry import __version__
from school_registry.api.errors import register_error_handlers
from school_registry.api.middleware.rate_limit import api_rate_limit, create_limiter
from school_registry.api.middleware.request_context import RequestContextMiddleware
from school_registry.api.routes import api_router, health
from school_registry.core.config import Settings, get_settings
from school_registry.infrastructure.database import DatabaseManager
from school_registry.infrastructure.database.migrations import run_migrations
from school_registry.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup applies pending migrations (when enabled) and opens the database
    manager; shutdown disposes of it. A manager already placed on
    ``app.state.db`` is used as is.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info(
        "Starting %s (environment=%s, debug=%s)",
        settings.api.title,
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================
    owns_db = getattr(app.state, "db", None) is None
    if owns_db:
        if settings.database.run_migrations:
            applied = await run_migrations(settings.database.url)
            logger.info("Applied %d migrations", len(applied))

        app.state.db = DatabaseManager.from_settings(settings)
        logger.info("Database connection initialized")

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================
    if owns_db:
        await app.state.db.close()
        app.state.db = None
        logger.info("Database connection closed")

    logger.info("Shutting down %s", settings.api.title)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Args:
        settings: Settings to use; defaults to the cached environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.api.title,
        description="REST API managing schools, students and enrollments",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.settings = settings
    app.state.db = None
    app.state.limiter = create_limiter(settings)
    app.state.rate_limit = api_rate_limit(settings)

    # =========================================================================
    # Exception handlers
    # =========================================================================
    register_error_handlers(app, settings)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================
    app.add_middleware(RequestContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    # Outside /api, so not rate limited
    app.add_api_route(
        "/",
        health.welcome,
        methods=["GET"],
        response_model=health.WelcomeResponse,
        tags=["Health"],
    )
    app.include_router(api_router)

    return app
