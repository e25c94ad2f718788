"""Operational endpoints: liveness, readiness and Prometheus metrics."""

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.observability import SERVICE_NAME, get_prometheus_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Observability"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Health Check",
    description="Check if the service is up",
    response_model=dict,
)
async def health_check():
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": "1.0.0",
        "environment": settings.environment,
    }


@router.get(
    "/ready",
    summary="Readiness Check",
    description="Check that the database answers queries",
    response_model=dict,
)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """
    Readiness check against the catalog store.

    Returns:
        JSONResponse: 200 when the database answers, 503 otherwise
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed", extra={"error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "service": SERVICE_NAME, "checks": {"database": "error"}},
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "ready", "service": SERVICE_NAME, "checks": {"database": "ok"}},
    )


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Endpoint for Prometheus to scrape metrics",
    response_class=Response,
)
async def metrics():
    return Response(
        content=get_prometheus_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )
