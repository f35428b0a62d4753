"""Request logging and HTTP metrics middleware."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram

from eligibility_service.utils.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probes and scrapes are logged at DEBUG to keep request logs readable
QUIET_PATH_PREFIXES = ("/health", "/metrics")

REQUEST_COUNT = Counter(
    "eligibility_http_requests_total",
    "HTTP requests served",
    ["method", "route", "status"]
)

REQUEST_DURATION = Histogram(
    "eligibility_http_request_duration_seconds",
    "HTTP request duration; eligibility requests include all upstream round trips",
    ["method", "route"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60),
)


def _route_label(request: Request) -> str:
    """Route template (``/eligibility/dental-benefits``) rather than the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with an ID and logs its outcome.

    An incoming ``X-Request-ID`` (set by a proxy or the UI) is reused so log
    lines can be joined across services; otherwise a fresh one is minted.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        quiet = request.url.path.startswith(QUIET_PATH_PREFIXES)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = int((time.time() - start_time) * 1000)

        fields = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "client": request.client.host if request.client else None,
        }
        if response.status_code >= 500:
            logger.warning("Request failed", extra=fields)
        elif quiet:
            logger.debug("Request completed", extra=fields)
        else:
            logger.info("Request completed", extra=fields)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Counts requests and observes latency per route template."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)

        # the route is only resolved once the router has run
        route = _route_label(request)
        REQUEST_DURATION.labels(method=request.method, route=route).observe(time.time() - start_time)
        REQUEST_COUNT.labels(method=request.method, route=route, status=response.status_code).inc()
        return response
