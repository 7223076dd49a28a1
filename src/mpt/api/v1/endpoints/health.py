"""
Health Check Endpoints

Provides system health and readiness endpoints for:
- Load balancer health checks
- Kubernetes probes
- Monitoring systems
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mpt import __version__
from mpt.api.dependencies import get_orchestrator
from mpt.config import get_settings
from mpt.config.logging_config import get_logger
from mpt.services.orchestration import SessionOrchestrator

logger = get_logger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""

    ready: bool
    primary_configured: bool
    secondary_configured: bool
    session_count: int
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Basic health check endpoint for load balancers",
)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns 200 if application is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=get_settings().env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness check including model backends",
)
async def readiness_check(
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> ReadinessResponse:
    """
    Detailed readiness check.

    Ready when the primary backend is configured; ``components``
    reports whether each backend currently answers.
    """
    gateway = orchestrator.gateway
    try:
        components = await gateway.health_check()
    except Exception as e:
        logger.warning("Backend health check failed", error=str(e))
        components = {"primary": False}

    return ReadinessResponse(
        ready=gateway.primary.is_configured(),
        primary_configured=gateway.primary.is_configured(),
        secondary_configured=gateway.has_secondary,
        session_count=len(orchestrator.store),
        components=components,
    )
