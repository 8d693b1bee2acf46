# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.dependencies import DbDep
from lib.database import check_connection, utcnow

logger = logging.getLogger(__name__)

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


class DatabaseCheck(BaseModel):
    status: str
    latency_ms: float | None = None
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    database: DatabaseCheck
    timestamp: str


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
        timestamp=utcnow().isoformat(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(db: DbDep):
    """
    Readiness check endpoint.

    Runs SELECT 1 and reports the round trip. Responds 503 when the
    database can't be reached so the instance is taken out of rotation.
    """
    started = time.perf_counter()
    try:
        check_connection(db)
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        body = ReadinessResponse(
            status="unavailable",
            database=DatabaseCheck(status="unhealthy", error=str(e)[:100]),
            timestamp=utcnow().isoformat(),
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    return ReadinessResponse(
        status="ready",
        database=DatabaseCheck(status="healthy", latency_ms=latency_ms),
        timestamp=utcnow().isoformat(),
    )
