"""
Health Check Router

Provides health check endpoints for monitoring application status.
"""

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from scorm_ingest.db.config import engine
from scorm_ingest.models.scorm import HealthCheckResponse
import time
import os
from datetime import datetime

# Initialize router
router = APIRouter()

# Application start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthCheckResponse, summary="Basic Health Check")
async def health_check():
    """
    Basic health check endpoint

    Returns application status, version, and environment information.
    This endpoint is used by load balancers and monitoring systems.
    """
    uptime = time.time() - _start_time

    return HealthCheckResponse(
        status="healthy",
        version=os.getenv("APP_VERSION", "1.0.0"),
        environment=os.getenv("ENVIRONMENT", "development"),
        timestamp=datetime.utcnow(),
        uptime=uptime
    )


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check():
    """
    Kubernetes-style readiness probe

    Returns 200 once the database answers, 503 otherwise.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Application not ready: {str(e)}"
        )
    return {"status": "ready", "timestamp": datetime.utcnow().isoformat()}


@router.get("/health/live", summary="Liveness Check")
async def liveness_check():
    """Kubernetes-style liveness probe"""
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "pid": os.getpid()
    }
