"""
FastAPI Production Application

Main entry point for the Sqinch space efficiency API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from sqinch.config import get_settings
from sqinch.config.logging import configure_logging
from sqinch.serving.api import create_api_app

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info(
        "Starting Sqinch API",
        environment=settings.app_env,
        narrative_enabled=app.state.narrative_service.enabled,
    )

    yield

    logger.info("Shutting down...")


app = create_api_app(settings, lifespan=lifespan)


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Sqinch Space Efficiency API",
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs" if settings.is_development else None,
    }


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
