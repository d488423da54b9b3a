"""
MTBM Maintenance Dashboard - Main FastAPI Application

This is the entry point for the FastAPI application.
It configures middleware, routes, static media and lifecycle handlers.
Nothing is built at import time; serve it with
``uvicorn mtbm_api.main:create_app --factory`` (see run.py).
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database

from .config.settings import Settings, get_settings
from .api.routes import api_router
from .api.middleware import CorrelationIdMiddleware, register_error_handlers
from .repositories.mongo_client import connect, create_indexes, close_connection
from .services.mail_service import MailService
from .services.media_service import MediaService, PUBLIC_PREFIX
from .utils.jwt import TokenService
from .utils.logger import setup_logging, get_logger

logger = get_logger(__name__)

APP_NAME = "MTBM Maintenance Dashboard"
APP_VERSION = "1.0.0"


# =============================================================================
# Application Lifecycle
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Connects to MongoDB unless a database was injected
        - Creates MongoDB indexes

    Shutdown:
        - Closes the client opened at startup
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting {APP_NAME} ({settings.environment})...")

    client = None
    if app.state.db is None:
        client = connect(settings)
        app.state.db = client[settings.mongodb_db]

    create_indexes(app.state.db)
    logger.info("Application started successfully")

    yield

    logger.info("Shutting down...")
    if client is not None:
        close_connection(client)
    logger.info("Application shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted
        database: Ready database handle; when omitted the lifespan connects
            using settings.mongodb_uri

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    setup_logging(settings)

    application = FastAPI(
        title=APP_NAME,
        description="Repair alerts, chat and reporting for micro-tunnel boring machine fleets",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )

    application.state.settings = settings
    application.state.db = database
    application.state.token_service = TokenService(settings)
    application.state.mail_service = MailService(settings)
    application.state.media_service = MediaService(settings)

    # Register middleware
    _configure_middleware(application, settings)

    # Register error handlers
    register_error_handlers(application)

    # Register routes and static media
    _configure_routes(application, settings)

    return application


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware."""
    # allow_credentials must be False when allowing all origins
    allow_all = settings.cors_origin.strip() == "*"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_origins_list,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )

    # Correlation ID middleware
    app.add_middleware(CorrelationIdMiddleware)


def _configure_routes(app: FastAPI, settings: Settings) -> None:
    """Configure application routes."""
    app.include_router(api_router, prefix="/api")

    # Uploaded avatars and chat media
    for folder in (MediaService.AVATAR_FOLDER, MediaService.CHAT_FOLDER, MediaService.ADMIN_CHAT_FOLDER):
        os.makedirs(os.path.join(settings.uploads_path, folder), exist_ok=True)
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=settings.uploads_path), name="uploads")

    # Root endpoint
    @app.get("/", tags=["Health"])
    def root():
        """Root endpoint with API information."""
        return {
            "name": APP_NAME,
            "version": APP_VERSION,
            "docs": "/api/docs" if settings.debug else None
        }

