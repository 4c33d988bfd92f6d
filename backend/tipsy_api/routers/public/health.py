"""
Health check endpoints.
Provides basic and detailed health status of the service and its database.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tipsy_shared.config.logging import api_logger as logger
from tipsy_shared.config.settings import settings
from tipsy_shared.infrastructure.db import get_db


router = APIRouter(tags=["health"])

SERVICE_NAME = "tipsy-api"


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """
    Health check that verifies database connectivity.

    Returns 503 Service Unavailable if the database is down.
    """
    checks = {
        "service": SERVICE_NAME,
        "environment": settings.environment,
        "dependencies": {},
    }

    try:
        db.execute(text("SELECT 1"))
        checks["dependencies"]["database"] = {"status": "healthy"}
        checks["status"] = "healthy"
    except SQLAlchemyError as exc:
        logger.error("Database health check failed", error=str(exc))
        checks["dependencies"]["database"] = {"status": "unhealthy"}
        checks["status"] = "degraded"
        return JSONResponse(content=checks, status_code=503)

    return checks
