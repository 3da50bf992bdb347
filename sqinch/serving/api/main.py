"""
FastAPI Application Factory

Creates and configures the main API application.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from sqinch.config import Settings, get_settings
from sqinch.insights import NarrativeService
from sqinch.serving.api.middleware import RequestLoggingMiddleware
from sqinch.serving.api.routes import (
    analysis_router,
    export_router,
    health_router,
    insights_router,
)
from sqinch.serving.cache import NarrativeCache


def create_api_app(
    settings: Optional[Settings] = None,
    narrative_service: Optional[NarrativeService] = None,
    narrative_cache: Optional[NarrativeCache] = None,
    lifespan=None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Optional settings override
        narrative_service: Optional narrative service (e.g. with a stub client)
        narrative_cache: Optional narrative cache

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Sqinch Space Efficiency API",
        description="Catalog space efficiency, segment, affinity and customer analysis",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    if narrative_service is None:
        narrative_service = NarrativeService(settings.insights)
    if narrative_cache is None:
        narrative_cache = NarrativeCache()
    app.state.settings = settings
    app.state.narrative_service = narrative_service
    app.state.narrative_cache = narrative_cache

    # Add CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(RequestLoggingMiddleware)

    # API routes
    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(analysis_router, prefix="/api/v1/analysis", tags=["Analysis"])
    app.include_router(export_router, prefix="/api/v1/export", tags=["Export"])
    app.include_router(insights_router, prefix="/api/v1/insights", tags=["Insights"])

    return app
