"""
FastAPI Main Application - Unified API entry point.

Run with: uvicorn teamsearch.interfaces.api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from teamsearch import __version__
from teamsearch.config import get_settings

from .deps import cleanup_services, init_services
from .middleware import (
    ErrorHandlerMiddleware,
    LatencyMiddleware,
    NoStoreMiddleware,
    RequestIDMiddleware,
)
from .routes import catalog, health, indexing, search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting TeamSearch API...")
    logger.info("  Catalog source: %s", settings.catalog_source)
    logger.info("  Vector backend: %s (enabled=%s)", settings.vector_backend, settings.vectors_enabled)

    await init_services()
    logger.info("  Services initialized")

    yield

    logger.info("Shutting down TeamSearch API...")
    await cleanup_services()


def create_app() -> FastAPI:
    """Create FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="TeamSearch API",
        description="Hybrid semantic + lexical search over the team catalog",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters - first added = innermost)
    # 1. Cache headers
    app.add_middleware(NoStoreMiddleware)

    # 2. Error handling (catch exceptions from routes)
    app.add_middleware(ErrorHandlerMiddleware)

    # 3. Latency tracking
    app.add_middleware(LatencyMiddleware)

    # 4. Request ID
    app.add_middleware(RequestIDMiddleware)

    # 5. CORS (framework middleware)
    allowed_origins = list(settings.cors_origins)
    if settings.api_debug:
        allowed_origins.append("http://localhost:*")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(search.router, prefix="/api/search", tags=["Search"])
    app.include_router(catalog.router, prefix="/api/teams", tags=["Catalog"])
    app.include_router(indexing.router, prefix="/api/index", tags=["Indexing"])

    return app


# Create app instance
app = create_app()
