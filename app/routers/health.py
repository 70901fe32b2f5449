# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# Readiness covers everything onboarding needs: database, document storage
# and the Redis that holds wizard state.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import PROFILES_TABLE

router = APIRouter()

VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str
    storage: str
    redis: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _unhealthy(e: Exception) -> str:
    return f"unhealthy: {str(e)[:50]}"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Returns "ready" only when the database, the documents bucket and Redis
    all respond; otherwise "degraded" with the failing check's error.
    """
    from core.services.wizard_service import WizardStateStore
    from lib.supabase_client import SupabaseClient

    checks = ChecksResponse(database="unknown", storage="unknown", redis="unknown")

    try:
        client = SupabaseClient.get_client()
        client.table(PROFILES_TABLE).select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        checks.database = _unhealthy(e)

    try:
        client = SupabaseClient.get_client()
        client.storage.get_bucket(settings.DOCUMENTS_BUCKET)
        checks.storage = "healthy"
    except Exception as e:
        checks.storage = _unhealthy(e)

    try:
        WizardStateStore.get_redis().ping()
        checks.redis = "healthy"
    except Exception as e:
        checks.redis = _unhealthy(e)

    all_healthy = all(v == "healthy" for v in checks.model_dump().values())

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check endpoint.

    Used by Kubernetes/Docker for restart decisions.
    """
    return {"status": "alive", "timestamp": _now()}
