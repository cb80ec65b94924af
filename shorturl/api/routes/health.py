"""Health check endpoints for monitoring application status."""

import time

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.core.config import settings
from shorturl.core.redis import redis_manager
from shorturl.db.base import DatabaseHealthCheck
from shorturl.db.session import get_db

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Get system health status",
    response_description="Health status of all system components"
)
async def health_check():
    """Check health of all system components."""
    health_status = {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "components": {}
    }

    database = await DatabaseHealthCheck.check_connection()
    health_status["components"]["database"] = database
    if database["status"] != "healthy":
        health_status["status"] = "degraded"

    # Check Redis connection if enabled
    if redis_manager.is_enabled:
        start_time = time.time()
        result = await redis_manager.ping()
        end_time = time.time()

        if result:
            health_status["components"]["redis"] = {
                "status": "healthy",
                "latency_ms": round((end_time - start_time) * 1000, 2)
            }
        else:
            health_status["status"] = "degraded"
            health_status["components"]["redis"] = {
                "status": "unhealthy",
                "error": "Redis ping failed"
            }

    return health_status


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    response_description="Application readiness status"
)
async def readiness_probe(db: AsyncSession = Depends(get_db)):
    """Check if application is ready to handle requests."""
    components_status = {"api": True, "database": False}

    try:
        result = await db.execute(text("SELECT 1"))
        components_status["database"] = result.scalar_one() == 1
    except SQLAlchemyError:
        components_status["database"] = False

    return {
        "ready": all(components_status.values()),
        "components": components_status
    }


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    response_description="Application liveness status"
)
async def liveness_probe():
    """Simple check that application is running."""
    return {"alive": True}
