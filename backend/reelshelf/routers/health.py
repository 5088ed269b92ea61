"""Health check and monitoring endpoints."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
import os

from reelshelf.database import get_db
from reelshelf.services.redis_service import is_redis_available, reset_redis_client
from reelshelf.services.logging_service import logger, app_metrics
from reelshelf.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if application is running.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION
    }


@router.get("/health/ready")
async def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness check.

    The database is required. Redis is reported but optional: without it
    the API runs uncached and without rate limiting. A configured Redis that
    is down is reconnected here, so an outage does not disable the cache for
    the life of the process.
    """
    redis_ok = is_redis_available()
    if not redis_ok and settings.REDIS_URL:
        reset_redis_client()
        redis_ok = is_redis_available()
        logger.info("Redis reconnect attempted", connected=redis_ok)

    checks = {"database": False, "redis": redis_ok}
    errors = []

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = True
    except SQLAlchemyError as e:
        errors.append(f"Database: {str(e)}")

    if checks["database"]:
        return {
            "status": "ready",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat()
        }

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "not_ready",
            "checks": checks,
            "errors": errors,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


@router.get("/health/live")
async def liveness_check():
    """Liveness check. Returns 200 if the process is alive."""
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "pid": os.getpid()
    }


@router.get("/metrics")
async def application_metrics():
    """
    Application metrics endpoint.

    Request, upstream, cache and platform sync counters since startup.
    """
    metrics = app_metrics.get_metrics()

    metrics["cache"]["hit_rate_percent"] = app_metrics.get_cache_hit_rate()
    metrics["requests"]["error_rate_percent"] = app_metrics.get_error_rate()

    return metrics
