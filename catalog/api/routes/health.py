"""Health & Readiness Probes: liveness and readiness endpoints.

Invariants:
    - GET /health always returns 200 if the process is serving (liveness)
    - GET /health/ready returns 503 until the gateway is attached and reachable
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from catalog.api.dependencies import get_context
from catalog.context import AppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe."""
    return {"status": "healthy", "service": "catalog"}


@router.get("/ready")
async def readiness_check(context: AppContext = Depends(get_context)):
    """Readiness probe: includes database connectivity."""
    if not context.ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "persistence_starting"},
        )
    if not await context.gateway.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
