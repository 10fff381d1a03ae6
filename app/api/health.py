"""
app/api/health.py

Purpose: Service info and health checks

- /        name, version, configured providers
- /health  database ping plus provider selection; 503 when degraded
- /ready   503 until MongoDB answers
- /live    process is up
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.db.mongo import check_database_health

SERVICE_NAME = "Admin Console API"
SERVICE_VERSION = "1.0.0"

router = APIRouter(tags=["Health"])


def _providers() -> dict:
    return {"sms": settings.SMS_PROVIDER, "email": settings.EMAIL_PROVIDER}


@router.get("/")
async def root():
    return {
        "name": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT,
        "providers": _providers(),
    }


@router.get("/health")
async def health_check():
    """
    Reports database reachability. Providers are only listed: they are
    exercised per request and their failures are reported there.
    """
    db_healthy = await check_database_health()

    body = {
        "status": "healthy" if db_healthy else "degraded",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": SERVICE_VERSION,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
            "sms_provider": settings.SMS_PROVIDER,
            "email_provider": settings.EMAIL_PROVIDER,
        },
    }
    return JSONResponse(content=body, status_code=200 if db_healthy else 503)


@router.get("/ready")
async def readiness_check():
    if await check_database_health():
        return {"status": "ready"}
    return JSONResponse(status_code=503, content={"status": "not_ready", "reason": "database_unavailable"})


@router.get("/live")
async def liveness_check():
    return {"status": "alive"}
