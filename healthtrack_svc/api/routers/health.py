"""
Health, readiness, and metrics endpoints for operational visibility.

This module provides:
- /health: Liveness probe (is the app running?)
- /ready: Readiness probe (database reachable, threshold tables loadable?)
- /metrics: Prometheus text format metrics
- /metrics/json: The same metrics as JSON

No authentication required (infrastructure use).
"""
import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel

from core.datetime_utils import format_iso, utc_now
from core.middleware import get_metrics_collector

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])

SERVICE_NAME = "HealthTrack API"
SERVICE_VERSION = "1.0.0"


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    name: str
    status: str  # "ok" or "unavailable"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


class MetricsResponse(BaseModel):
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float
    measurements_recorded_total: int


# =============================================================================
# LIVENESS
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Returns immediately without checking dependencies."
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=SERVICE_VERSION,
        timestamp=format_iso(utc_now())
    )


# =============================================================================
# READINESS
# =============================================================================

def _check_database() -> DependencyStatus:
    """Run a trivial query against SQLite."""
    from core.dependencies import get_database

    start = time.perf_counter()
    try:
        conn = get_database().get_connection()
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()
    except Exception as e:
        logger.error("Database readiness check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="database",
            status="unavailable",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            message=f"Connection failed: {type(e).__name__}"
        )
    return DependencyStatus(
        name="database",
        status="ok",
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
        message="SQLite connection healthy"
    )


def _check_thresholds() -> DependencyStatus:
    """Make sure the threshold tables load and validate."""
    from core.dependencies import get_threshold_tables

    try:
        get_threshold_tables()
    except (OSError, ValueError) as e:
        logger.error("Threshold tables readiness check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="thresholds",
            status="unavailable",
            message=f"Cannot load threshold tables: {type(e).__name__}"
        )
    return DependencyStatus(name="thresholds", status="ok", message="Threshold tables loaded")


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Checks the database and threshold tables. Returns 503 if either is unavailable."
)
async def readiness_check(response: Response) -> ReadyResponse:
    dependencies = [_check_database(), _check_thresholds()]

    if any(d.status != "ok" for d in dependencies):
        status = "not_ready"
        response.status_code = 503
    else:
        status = "ready"

    return ReadyResponse(
        status=status,
        dependencies=dependencies,
        timestamp=format_iso(utc_now())
    )


# =============================================================================
# METRICS
# =============================================================================

@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Request counts, latency percentiles and recorded measurements by type and status."
)
async def get_metrics() -> Response:
    return Response(
        content=get_metrics_collector().get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get(
    "/metrics/json",
    response_model=MetricsResponse,
    summary="JSON metrics"
)
async def get_metrics_json() -> MetricsResponse:
    return MetricsResponse(**get_metrics_collector().get_summary())


@router.get("/", summary="API root")
async def root() -> Dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "metrics": "/metrics"
    }
