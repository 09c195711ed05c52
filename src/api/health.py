"""
RadioManager Dialog Service - Health API Routes

Endpoints:
- GET /: Liveness probe, plain 200
- GET /health: Service health with version info

Patterns Applied:
- Health Check Pattern
- HealthService class with Pydantic response model
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from src.core.config import Settings, get_settings
from src.core.logging import SERVICE_NAME, get_logger

router = APIRouter(tags=["health"])

logger = get_logger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    service: str


# =============================================================================
# Health Service
# =============================================================================


class HealthService:
    """Service class for health check operations.

    The service keeps no backend connection state, so it is healthy as soon
    as it accepts requests.
    """

    def __init__(self, version: str = "0.1.0", service_name: str = SERVICE_NAME):
        """Initialize health service.

        Args:
            version: Service version string
            service_name: Name reported in the "service" field
        """
        self._version = version
        self._service_name = service_name

    def check_health(self) -> dict[str, Any]:
        """Check basic service health.

        Returns:
            Health status dictionary with status, version, service
        """
        return {
            "status": "healthy",
            "version": self._version,
            "service": self._service_name,
        }


def get_health_service(settings: Settings = Depends(get_settings)) -> HealthService:
    """Health service reporting the configured service name and version."""
    return HealthService(version=settings.version, service_name=settings.service_name)


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/", include_in_schema=False, response_class=PlainTextResponse)
async def liveness() -> str:
    """Kubernetes liveness probe endpoint."""
    return "OK"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Basic health check endpoint for liveness probe",
)
async def health_check(
    health_service: HealthService = Depends(get_health_service),
) -> HealthResponse:
    """Health check endpoint with service info."""
    data = health_service.check_health()
    logger.debug("health_check", status=data["status"])
    return HealthResponse(**data)
