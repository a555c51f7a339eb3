"""
FastAPI application entry point.
Builds the app from explicit settings and owns the store client lifecycle.

Run with:
    uvicorn app.main:create_app --factory --port 3000
or the `photo-upload-api` console script.
"""
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from app.config import Settings, get_settings
from app.api.router import api_router
from app.middleware.error_handler import setup_exception_handlers
from app.middleware.metrics_middleware import MetricsMiddleware
from app.middleware.origin_allowlist import OriginAllowlistMiddleware
from app.storage.sanity_client import SanityClient
from app.utils.logging import configure_logging

SERVICE_NAME = "photo-upload"
VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Configure logging, open the Sanity client
    - Shutdown: Close the Sanity client
    """
    settings: Settings = app.state.settings
    configure_logging(SERVICE_NAME, settings.log_level)

    app.state.store = SanityClient.from_settings(settings)

    yield

    await app.state.store.aclose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Settings are read here, once; missing Sanity credentials raise a
    ValidationError before the server starts listening.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Photo Upload API",
        description="Stores event photos in Sanity with their capture time",
        version=VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings

    setup_exception_handlers(app)

    # Metrics middleware (innermost, only sees requests that pass the origin check)
    app.add_middleware(MetricsMiddleware)

    # CORS headers and preflight answers
    if settings.allow_all_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allowed_origins,
            allow_methods=["POST", "OPTIONS"],
            allow_headers=["*"],
        )
        # Added last so it runs first and rejects unlisted origins before routing
        app.add_middleware(OriginAllowlistMiddleware, allowed_origins=settings.cors_allowed_origins)

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Photo Upload API",
            "version": VERSION,
            "environment": settings.environment
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    return app


def run():
    """Console entry point."""
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
