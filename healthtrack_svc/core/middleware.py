"""
FastAPI middleware and in-memory metrics for the HealthTrack API.

This module provides:
- Request/response logging with request_id propagation
- Request timing for latency percentiles
- Counters of recorded measurements by type and classified status

Metrics live in fixed-size buffers and plain counters, exposed through the
/metrics (Prometheus text) and /metrics/json endpoints.

Middleware Stack Order (in main.py):
    1. LoggingMiddleware (outermost - captures everything)
    2. CORS Middleware
    3. Application routes
"""

import logging
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Deque, Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import set_request_id, clear_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


# =============================================================================
# IN-MEMORY METRICS COLLECTOR
# =============================================================================

@dataclass
class RequestMetrics:
    """A completed request."""
    timestamp: datetime
    method: str
    path: str
    status_code: int
    duration_ms: float
    request_id: str


@dataclass
class MetricsCollector:
    """
    Request and measurement metrics kept in memory.

    Latency percentiles are computed over the last `max_history` requests.
    """
    max_history: int = 1000

    total_requests: int = 0
    total_2xx: int = 0
    total_4xx: int = 0
    total_5xx: int = 0

    _requests: Deque[RequestMetrics] = field(default_factory=deque)
    _measurements: Counter = field(default_factory=Counter)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def __post_init__(self):
        self._requests = deque(maxlen=self.max_history)

    def record_request(self, metrics: RequestMetrics) -> None:
        with self._lock:
            self._requests.append(metrics)
            self.total_requests += 1
            if 200 <= metrics.status_code < 300:
                self.total_2xx += 1
            elif 400 <= metrics.status_code < 500:
                self.total_4xx += 1
            elif 500 <= metrics.status_code < 600:
                self.total_5xx += 1

    def record_measurement(self, measurement_type: str, status: str) -> None:
        """Count a newly recorded measurement by type and classified status."""
        with self._lock:
            self._measurements[(measurement_type, status)] += 1

    def measurement_counts(self) -> Dict[Tuple[str, str], int]:
        with self._lock:
            return dict(self._measurements)

    def get_latency_percentiles(self) -> Dict[str, float]:
        """p50/p95/p99 latency in milliseconds, 0 when no requests were seen."""
        with self._lock:
            durations = sorted(r.duration_ms for r in self._requests)
        if not durations:
            return {"p50": 0, "p95": 0, "p99": 0}

        n = len(durations)

        def percentile(p: float) -> float:
            return durations[min(int(n * p / 100), n - 1)]

        return {
            "p50": round(percentile(50), 2),
            "p95": round(percentile(95), 2),
            "p99": round(percentile(99), 2),
        }

    def get_summary(self) -> Dict:
        latencies = self.get_latency_percentiles()
        return {
            "http_requests_total": self.total_requests,
            "http_requests_2xx_total": self.total_2xx,
            "http_requests_4xx_total": self.total_4xx,
            "http_requests_5xx_total": self.total_5xx,
            "http_request_duration_ms_p50": latencies["p50"],
            "http_request_duration_ms_p95": latencies["p95"],
            "http_request_duration_ms_p99": latencies["p99"],
            "measurements_recorded_total": sum(self.measurement_counts().values()),
        }

    def get_prometheus_format(self) -> str:
        """Metrics in Prometheus text exposition format."""
        summary = self.get_summary()
        lines = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
            f'http_requests_total {summary["http_requests_total"]}',
            "",
            "# HELP http_requests_by_status HTTP requests by status category",
            "# TYPE http_requests_by_status counter",
            f'http_requests_by_status{{status="2xx"}} {summary["http_requests_2xx_total"]}',
            f'http_requests_by_status{{status="4xx"}} {summary["http_requests_4xx_total"]}',
            f'http_requests_by_status{{status="5xx"}} {summary["http_requests_5xx_total"]}',
            "",
            "# HELP http_request_duration_ms Request duration in milliseconds",
            "# TYPE http_request_duration_ms gauge",
            f'http_request_duration_ms{{quantile="0.5"}} {summary["http_request_duration_ms_p50"]}',
            f'http_request_duration_ms{{quantile="0.95"}} {summary["http_request_duration_ms_p95"]}',
            f'http_request_duration_ms{{quantile="0.99"}} {summary["http_request_duration_ms_p99"]}',
            "",
            "# HELP measurements_recorded_total Measurements recorded by type and status",
            "# TYPE measurements_recorded_total counter",
        ]
        for (measurement_type, status), count in sorted(self.measurement_counts().items()):
            lines.append(
                f'measurements_recorded_total{{type="{measurement_type}",status="{status}"}} {count}'
            )
        return "\n".join(lines) + "\n"


metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    return metrics_collector


# =============================================================================
# LOGGING MIDDLEWARE
# =============================================================================

class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging with request_id propagation.

    Reuses an incoming X-Request-ID header when present, otherwise generates
    a short id. The id is attached to every log record emitted while the
    request is handled and echoed in the response header.
    """

    # Paths to exclude from detailed logging (reduce noise)
    EXCLUDED_PATHS = {"/health", "/ready", "/metrics", "/metrics/json", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        set_request_id(request_id)

        method = request.method
        path = request.url.path
        quiet = path in self.EXCLUDED_PATHS
        start_time = time.perf_counter()

        if not quiet:
            logger.info(
                "Request started",
                extra={
                    "method": method,
                    "path": path,
                    "query": str(request.query_params) if request.query_params else None,
                }
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with exception",
                extra={"method": method, "path": path, "error": str(e)}
            )
            clear_request_id()
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        metrics_collector.record_request(RequestMetrics(
            timestamp=datetime.now(timezone.utc),
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            request_id=request_id,
        ))

        if not quiet:
            logger.log(
                logging.WARNING if response.status_code >= 400 else logging.INFO,
                "Request completed",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )
        clear_request_id()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
