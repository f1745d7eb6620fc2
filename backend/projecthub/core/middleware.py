"""Request middleware shared by both apps: request IDs, access log, HTTP metrics."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from projecthub.core.metrics import http_request_duration_seconds, http_requests_total

REQUEST_ID_HEADER = "X-Request-ID"

# Probe and scrape traffic is counted but not logged
_UNLOGGED_PATHS = frozenset({"/health/live", "/health/ready", "/metrics"})

logger = structlog.stdlib.get_logger("projecthub.http")


def route_label(request: Request) -> str:
    """Route template for metric labels, e.g. /api/projects/{project_id}."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Reuse the caller's id when it sends one
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration = time.perf_counter() - start

            path = route_label(request)
            http_requests_total.labels(
                method=request.method, path=path, status=response.status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method, path=path
            ).observe(duration)

            response.headers[REQUEST_ID_HEADER] = request_id
            if path not in _UNLOGGED_PATHS:
                logger.info(
                    "request_completed",
                    method=request.method,
                    path=path,
                    status=response.status_code,
                    duration_ms=round(duration * 1000, 2),
                )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
