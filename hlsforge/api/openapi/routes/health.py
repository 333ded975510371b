"""Health check endpoints."""

from enum import Enum

from fastapi import APIRouter
from pydantic import BaseModel, Field

from hlsforge.api.dependencies import FactoryDep, SettingsDep

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Additional details")
    latency_ms: float | None = Field(default=None, description="Check latency")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


async def _component_checks(factory: FactoryDep) -> list[ComponentHealth]:
    components: list[ComponentHealth] = []
    probes = {
        "document_db": factory.get_document_db().health_check,
        "storage": factory.get_video_storage().health_check,
    }
    for name, check in probes.items():
        result = await check()
        components.append(
            ComponentHealth(
                name=name,
                status=HealthStatus.HEALTHY if result.healthy else HealthStatus.UNHEALTHY,
                message=result.message,
                latency_ms=round(result.latency_ms, 2),
            )
        )
    return components


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Check health of the document database and asset storage."""
    components = await _component_checks(factory)

    unhealthy = sum(1 for c in components if c.status == HealthStatus.UNHEALTHY)
    if unhealthy == 0:
        overall_status = HealthStatus.HEALTHY
    elif unhealthy < len(components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.UNHEALTHY

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check for Kubernetes probes.",
)
async def readiness(
    factory: FactoryDep,
) -> ReadinessResponse:
    """Ready when every component check passes."""
    components = await _component_checks(factory)
    checks = {c.name: c.status == HealthStatus.HEALTHY for c in components}
    return ReadinessResponse(ready=all(checks.values()), checks=checks)
