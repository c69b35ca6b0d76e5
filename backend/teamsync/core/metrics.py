"""
Prometheus Metrics Collection for the TeamSync Backend

Each API pod keeps its own registry; Prometheus scrapes and aggregates them.
"""

import logging
import re
import time
from importlib.metadata import version as get_version
from typing import Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# =============================================================================
# Application Info Metrics
# =============================================================================

# Get version from package metadata (pyproject.toml)
try:
    APP_VERSION = get_version("teamsync")
except Exception:
    APP_VERSION = "unknown"

app_info = Info("teamsync_app", "Application information")
app_info.info(
    {
        "version": APP_VERSION,
        "app_name": "TeamSync",
    }
)

# =============================================================================
# HTTP Request Metrics
# =============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

# =============================================================================
# Membership Metrics
# =============================================================================

membership_operations_total = Counter(
    "teamsync_membership_operations_total",
    "Membership state machine operations by outcome (ok or error code)",
    ["operation", "outcome"],
)

team_lock_wait_seconds = Histogram(
    "teamsync_team_lock_wait_seconds",
    "Time spent waiting for the per-team lock",
    buckets=(0.001, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

balance_score_recomputations_total = Counter(
    "teamsync_balance_score_recomputations_total",
    "Balance score recomputations",
)

# =============================================================================
# Automation Metrics
# =============================================================================

automation_task_runs_total = Counter(
    "teamsync_automation_task_runs_total",
    "Automation task runs by task and status",
    ["task", "status"],
)

automation_documents_updated_total = Counter(
    "teamsync_automation_documents_updated_total",
    "Documents changed by automation tasks",
    ["task"],
)

# =============================================================================
# Cache Metrics
# =============================================================================

cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_type"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_type"],
)

# =============================================================================
# External API Metrics
# =============================================================================

external_api_requests_total = Counter(
    "external_api_requests_total",
    "Total external API requests",
    ["service"],
)

external_api_errors_total = Counter(
    "external_api_errors_total",
    "Total external API errors",
    ["service"],
)

external_api_duration_seconds = Histogram(
    "external_api_duration_seconds",
    "External API request duration in seconds",
    ["service"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

ai_fallbacks_total = Counter(
    "teamsync_ai_fallbacks_total",
    "Generative-text operations answered by the deterministic fallback",
    ["operation"],
)

# =============================================================================
# Notification Metrics
# =============================================================================

notifications_sent_total = Counter(
    "notifications_sent_total",
    "Total notifications by channel and outcome",
    ["channel", "outcome"],
)

# =============================================================================
# System Metrics
# =============================================================================

uptime_seconds = Gauge(
    "uptime_seconds",
    "Application uptime in seconds",
)

# Track startup time
startup_time = time.time()


def update_uptime():
    """Update the uptime metric."""
    uptime_seconds.set(time.time() - startup_time)


# =============================================================================
# Prometheus Metrics Endpoint
# =============================================================================


async def metrics_endpoint(request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    Should only be reachable from inside the cluster, not through the Ingress.
    """
    update_uptime()
    metrics_output = generate_latest(REGISTRY)
    return Response(content=metrics_output, media_type=CONTENT_TYPE_LATEST)


# =============================================================================
# Middleware for HTTP Metrics
# =============================================================================


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to automatically collect HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip metrics for the /metrics endpoint itself to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = normalize_path(request.url.path)

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
        except Exception as e:
            logger.error(f"Error in PrometheusMiddleware: {e}")
            raise
        finally:
            duration = time.time() - start_time
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
            http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

        return response


def normalize_path(path: str) -> str:
    """
    Normalize URL paths to prevent cardinality explosion.

    Examples:
      /api/v1/teams/550e8400-e29b-41d4-a716-446655440000 -> /api/v1/teams/{id}
      /api/v1/teams/12/card -> /api/v1/teams/{id}/card
    """
    path = re.sub(
        r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
        "/{id}",
        path,
        flags=re.IGNORECASE,
    )
    path = re.sub(r"/[0-9a-f]{24}", "/{id}", path, flags=re.IGNORECASE)
    path = re.sub(r"/\d+", "/{id}", path)
    return path

