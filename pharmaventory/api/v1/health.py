"""Health check endpoints."""

from fastapi import APIRouter
from sqlalchemy import text

from pharmaventory.core.config import settings
from pharmaventory.core.deps import DBSession, get_redis_client
from pharmaventory.schemas.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DBSession) -> HealthResponse:
    """
    Health check endpoint.

    Checks database connectivity, and Redis when it backs the session store.
    """
    healthy = True
    checks: dict[str, str] = {}

    # Check database connection
    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        healthy = False
        checks["database"] = f"unhealthy: {str(e)}"

    # Check Redis connection
    if settings.session_backend == "redis":
        try:
            await get_redis_client().ping()
            checks["redis"] = "healthy"
        except Exception as e:
            healthy = False
            checks["redis"] = f"unhealthy: {str(e)}"

    checks["remote_chat"] = "enabled" if settings.remote_chat_enabled else "disabled"

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=settings.version,
        environment=settings.environment,
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness probe for Kubernetes/container orchestration.

    Simple check that the service is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(db: DBSession) -> dict[str, str]:
    """
    Readiness probe for Kubernetes/container orchestration.

    Checks if the service is ready to receive traffic.
    """
    await db.execute(text("SELECT 1"))

    return {"status": "ready"}
