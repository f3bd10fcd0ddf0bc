"""
Liveness and readiness checks.
"""

import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from onboard.api.deps import get_app_settings
from onboard.core.config import Settings
from onboard.db.base import utcnow

router = APIRouter(prefix="/health", tags=["Health"])

STARTED_AT = time.monotonic()


@router.get("")
async def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
    """Liveness check for Docker and load balancers."""
    return {
        "success": True,
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 2),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "storage": request.app.state.storage.name,
        "demoMode": settings.PAYMENTS_DEMO_MODE,
    }


@router.get("/database")
async def database_health(request: Request):
    """Readiness check: 503 while the store cannot be reached."""
    storage = request.app.state.storage
    healthy = await storage.ping()
    body = {
        "success": healthy,
        "status": "healthy" if healthy else "degraded",
        "storage": storage.name,
        "timestamp": utcnow().isoformat(),
    }
    if not healthy:
        body["message"] = "Database is unreachable"
    return JSONResponse(status_code=200 if healthy else 503, content=body)
