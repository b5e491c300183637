# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the StudyPilot API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.dependencies import close_services, init_services
from src.api.middleware.auth import AuthMiddleware
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes the database, object storage, content generator and
    activity timer registry on startup. On shutdown, open study sessions
    are ended before connections are closed.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting StudyPilot API (environment=%s, debug=%s)",
        settings.environment,
        settings.debug,
    )

    try:
        await init_services()
        logger.info("Services initialized")
    except Exception as e:
        # health/ready reports the database state; routes answer 503 until then
        logger.warning("Failed to initialize services: %s", str(e))

    yield

    try:
        await close_services()
        logger.info("Services closed")
    except Exception as e:
        logger.warning("Error closing services: %s", str(e))

    logger.info("Shutting down StudyPilot API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="StudyPilot API",
        description="AI study assistant: document library, quizzes, study materials and analytics",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # 307 redirects from /path to /path/ drop the Authorization header
        redirect_slashes=False,
    )

    # =========================================================================
    # Middleware (last added is first executed)
    # =========================================================================
    app.add_middleware(AuthMiddleware)
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
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
