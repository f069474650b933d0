"""
Health check endpoints for monitoring and orchestration (K8s, Docker, etc.)

- /health: Basic liveness check (always returns 200)
- /health/live: Alias of /health
- /health/ready: Readiness check (database reachable, circuit breaker states)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.api.dependencies import ServiceContainer, get_container
from app.infrastructure.circuit_breaker import BreakerState

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "catalog-mutation-service"


@router.get("/health")
async def health_check():
    """
    Basic liveness check.

    Returns 200 OK if the application is running.
    """
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/live")
async def health_check_live():
    """Alias for /health for Kubernetes liveness checks."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/ready")
async def health_check_ready(container: ServiceContainer = Depends(get_container)):
    """
    Readiness check.

    Not ready when the database does not answer or the persistence circuit
    is OPEN. The event broker circuit is reported but never blocks traffic,
    since event delivery is best effort.
    """
    health_status = {"status": "ready", "checks": {}, "circuits": {}}
    ready = True

    if container.engine is not None:
        try:
            async with container.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            health_status["checks"]["database"] = "healthy"
        except Exception as e:
            logger.error("Readiness check: Database unhealthy", exc_info=e)
            health_status["checks"]["database"] = "unhealthy"
            ready = False
    else:
        health_status["checks"]["database"] = "in_memory"

    for breaker in container.breakers:
        snapshot = breaker.snapshot()
        health_status["circuits"][breaker.name] = {
            "state": snapshot.state.value,
            "failure_count": snapshot.failure_count,
        }

    if container.persistence_resilience.breaker.state is BreakerState.OPEN:
        ready = False

    if not ready:
        health_status["status"] = "not_ready"
        return JSONResponse(status_code=503, content=health_status)
    return health_status
