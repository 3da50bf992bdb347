"""
Health Check Endpoints

Liveness and status for orchestration systems.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel


router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    The analysis engine has no external dependencies, so the service is
    healthy whenever it responds. Narrative generation is reported
    separately because it is optional.
    """
    settings = request.app.state.settings
    service = getattr(request.app.state, "narrative_service", None)
    narrative_enabled = bool(service is not None and service.enabled)

    return HealthResponse(
        status="healthy",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.utcnow(),
        checks={
            "narrative": {"status": "enabled" if narrative_enabled else "disabled"},
        },
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Kubernetes liveness probe"""
    return {"status": "alive"}
